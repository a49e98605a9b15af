"""
VTL mapping templates for the Lambda integration.

https://docs.aws.amazon.com/apigateway/latest/developerguide/api-gateway-mapping-template-reference.html
"""

import textwrap


def _strip_indent(template: str) -> str:
    return textwrap.dedent(template).strip()


# Unwraps the `response` field returned by the backend
JSON_RESPONSE_TEMPLATE = _strip_indent("""
    #set($inputRoot = $input.path('$'))
    $inputRoot.response
""")

# Unwraps the `html` field returned by the backend
HTML_RESPONSE_TEMPLATE = _strip_indent("""
    #set($inputRoot = $input.path('$'))
    $inputRoot.html
""")

MOCK_REQUEST_TEMPLATE = '{ "statusCode": 200 }'

MOCK_RESPONSE_BODY = "Hello World from ApiGateway"


def lambda_request_template(response_content_type: str) -> str:
    """
    Envelope sent to the backend function: every path, querystring and header
    parameter grouped by type, the raw JSON body, the content type the backend
    is expected to answer with and the (base64 encoded) stage variables.
    """
    # § "Param Mapping Template Example" of the reference above
    return _strip_indent(f"""
        #set($allParams = $input.params())
        {{
          "params" : {{
            #foreach($type in $allParams.keySet())
            #set($params = $allParams.get($type))
            "$type" : {{
              #foreach($paramName in $params.keySet())
              "$paramName" : "$util.escapeJavaScript($params.get($paramName))"
              #if($foreach.hasNext),#end
              #end
            }}
            #if($foreach.hasNext),#end
            #end
          }},
          "body": $input.json('$'),
          "meta": {{
            "expectedResponseContentType": "{response_content_type}"
          }},
          "stageVariables" : {{
            #foreach($name in $stageVariables.keySet())
            "$name" : "$util.base64Decode($stageVariables.get($name))"
            #if($foreach.hasNext),#end
            #end
          }}
        }}
    """)
