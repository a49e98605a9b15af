"""
CloudFormation template partials for an API Gateway REST API.

Every builder is a pure function returning a mapping of logical ID to resource
definition. Composite builders merge their parts with ``merge_partials``, so a
shared resource emitted twice (the execution role, the response model) ends up
once in the merged template.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Dict, Iterable, Mapping, NamedTuple, Optional, Union

from apig_cfn_factory.errors import ConfigurationError
from apig_cfn_factory.factories import mapping_templates
from apig_cfn_factory.naming import (
    capitalize_first,
    template_api_id,
    template_deployment_name,
    template_lambda_name,
    template_method_name,
    template_model_name,
    template_resource_name,
    template_stage_name,
)
from apig_cfn_factory.template_partial import merge_partials

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html"

RESPONSE_MODEL_NAME = "HelloWorldModel"
EXECUTION_ROLE_NAME = "APIGExecutionRole"
INNER_STACK_NAME = "InnerStack"

_PATH_PARAMETER = re.compile(r"\{(.*)\}")


class ResourceTree(NamedTuple):
    """ Leaf resource name (None for the API root) and the resources leading to it """
    resource_name: Optional[str]
    template_partial: Dict


class MethodInfo(NamedTuple):
    resource_name: Optional[str] = None
    http_method: str = "GET"


def _rest_api_ref() -> Dict:
    return {"Ref": template_api_id()}


def _root_resource_id() -> Dict:
    return {"Fn::GetAtt": [template_api_id(), "RootResourceId"]}


def _resource_id(resource_name: Optional[str]) -> Dict:
    if not resource_name:
        return _root_resource_id()
    return {"Ref": template_resource_name(resource_name)}


def _content_type_key(response_content_type: str) -> Optional[str]:
    """ Supported content type contained in the (possibly charset-qualified) value """
    if JSON_CONTENT_TYPE in response_content_type:
        return JSON_CONTENT_TYPE
    if HTML_CONTENT_TYPE in response_content_type:
        return HTML_CONTENT_TYPE
    return None


def template_rest(app_name: str = "App", description: str = None) -> Dict:
    return {
        template_api_id(): {
            "Type": "AWS::ApiGateway::RestApi",
            "Properties": {
                "Description": description or f"REST API for {app_name} app",
                "Name": f"{app_name}API"
            }
        }
    }


def _path_token_name(path_token: str) -> str:
    if path_token[0] == "{":
        match = _PATH_PARAMETER.match(path_token)
        if not match or not match.group(1):
            raise AssertionError(f"malformed path parameter `{path_token}`")
        return capitalize_first(match.group(1))
    return capitalize_first(path_token)


def template_resource_helper(resource_path: str) -> ResourceTree:
    """
    Expand a resource path such as ``users/{id}`` into one resource per path
    segment, each one a child of the previous segment.

    Resource names are derived from the segment alone, so equal segments under
    different parents share a name and the last one wins. A segment holding
    several parameters, such as ``{a}{b}``, is named after everything between
    the first ``{`` and the last ``}`` (``A}{b``), which is not a valid logical id.
    """
    # Both would leave an empty segment in the middle of the tree
    if resource_path.startswith("/") or "//" in resource_path:
        raise AssertionError("`path` should not begin with a /")

    last_resource_name = None
    partials = []
    for path_token in resource_path.split("/"):
        if not path_token:
            continue
        resource_name = _path_token_name(path_token)
        partials.append(
            template_resource(
                resource_name=resource_name,
                resource_path=path_token,
                parent_resource_name=last_resource_name
            )
        )
        last_resource_name = resource_name

    logger.debug(f"resource_path:{resource_path} leaf_resource:{last_resource_name}")
    return ResourceTree(
        resource_name=last_resource_name,
        template_partial=merge_partials(*partials)
    )


def template_resource(
    resource_name: str,
    resource_path: str,
    parent_resource_name: str = None
) -> Dict:
    return {
        template_resource_name(resource_name): {
            "Type": "AWS::ApiGateway::Resource",
            "Properties": {
                "RestApiId": _rest_api_ref(),
                "ParentId": _resource_id(parent_resource_name),
                "PathPart": resource_path
            }
        }
    }


def template_model(model_name: str, model_schema) -> Dict:
    return {
        template_model_name(model_name): {
            "Type": "AWS::ApiGateway::Model",
            "Properties": {
                "ContentType": JSON_CONTENT_TYPE,
                "Description": f"Model {model_name}",
                "RestApiId": _rest_api_ref(),
                "Schema": model_schema
            }
        }
    }


def template_mock_integration() -> Dict:
    return {
        "IntegrationResponses": [{
            "ResponseTemplates": {
                HTML_CONTENT_TYPE: mapping_templates.MOCK_RESPONSE_BODY
            },
            "StatusCode": 200
        }],
        "RequestTemplates": {
            JSON_CONTENT_TYPE: mapping_templates.MOCK_REQUEST_TEMPLATE
        },
        "Type": "MOCK"
    }


def template_invokation_role() -> Dict:
    """ Role assumed by API Gateway to invoke the backend functions """
    return {
        EXECUTION_ROLE_NAME: {
            "Type": "AWS::IAM::Role",
            "Properties": {
                "AssumeRolePolicyDocument": {
                    "Version": "2012-10-17",
                    "Statement": [{
                        "Effect": "Allow",
                        "Principal": {"Service": ["apigateway.amazonaws.com"]},
                        "Action": ["sts:AssumeRole"]
                    }]
                },
                "Path": "/",
                "Policies": [{
                    "PolicyName": "invokeLambda",
                    "PolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [{
                            "Effect": "Allow",
                            "Action": ["lambda:InvokeFunction"],
                            "Resource": "arn:aws:lambda:*:*:*"
                        }]
                    }
                }]
            }
        }
    }


def template_lambda_integration(
    lambda_name: str,
    response_content_type: str,
    lambda_namer: Callable[[str], str] = template_lambda_name
) -> Dict:
    content_type = _content_type_key(response_content_type)
    if content_type == JSON_CONTENT_TYPE:
        response_template = {JSON_CONTENT_TYPE: mapping_templates.JSON_RESPONSE_TEMPLATE}
    elif content_type == HTML_CONTENT_TYPE:
        response_template = {HTML_CONTENT_TYPE: mapping_templates.HTML_RESPONSE_TEMPLATE}
    else:
        raise ConfigurationError(
            "Configuration Error in Lambda Integration Response: no (valid) responseContentType "
            "has been defined. Supported values are application/json and text/html, "
            "with optional encoding."
        )
    return {
        "IntegrationHttpMethod": "POST",
        "IntegrationResponses": [{
            "ResponseTemplates": response_template,
            "StatusCode": 200
        }],
        "PassthroughBehavior": "NEVER",
        "RequestTemplates": {
            JSON_CONTENT_TYPE: mapping_templates.lambda_request_template(response_content_type)
        },
        "Type": "AWS",
        "Credentials": {"Fn::GetAtt": [EXECUTION_ROLE_NAME, "Arn"]},
        "Uri": {"Fn::Join": ["", [
            "arn:aws:apigateway:",
            {"Ref": "AWS::Region"},
            ":lambda:path/2015-03-31/functions/",
            {"Fn::GetAtt": [lambda_namer(lambda_name), "Arn"]},
            "/invocations"
        ]]}
    }


def template_method(
    resource_name: str = None,
    http_method: str = "GET",
    lambda_name: str = None,
    response_content_type: str = None,
    lambda_namer: Callable[[str], str] = template_lambda_name
) -> Dict:
    """
    Method bound to ``resource_name`` (the API root when None), integrated
    with the ``lambda_name`` backend function, or with a mock answering a
    static greeting when no function is given.

    The execution role and the placeholder response model are emitted with
    every method under fixed names; merging several methods keeps one of each.
    """
    if lambda_name:
        integration_config = template_lambda_integration(
            lambda_name=lambda_name,
            response_content_type=response_content_type or "",
            lambda_namer=lambda_namer
        )
    else:
        integration_config = template_mock_integration()

    content_type = _content_type_key(response_content_type or "")
    if content_type is None:
        raise ConfigurationError(
            "Configuration Error in Lambda Method: no (valid) responseContentType "
            "has been defined. Supported values are application/json and text/html, "
            "with optional encoding."
        )
    response_model = {
        content_type: {"Ref": template_model_name(RESPONSE_MODEL_NAME)}
    }

    method_name = template_method_name(resource_name=resource_name, http_method=http_method)
    logger.debug(
        f"method:{method_name} integration:{integration_config['Type']} "
        f"content_type:{content_type}"
    )
    return merge_partials(
        template_invokation_role(),
        template_model(model_name=RESPONSE_MODEL_NAME, model_schema="{}"),
        {
            method_name: {
                "Type": "AWS::ApiGateway::Method",
                "Properties": {
                    "RestApiId": _rest_api_ref(),
                    "ResourceId": _resource_id(resource_name),
                    "HttpMethod": http_method,
                    "AuthorizationType": "NONE",
                    "Integration": integration_config,
                    "MethodResponses": [{
                        "ResponseModels": response_model,
                        "StatusCode": 200
                    }]
                }
            }
        }
    )


def _method_name_of(method_info: Union[MethodInfo, Mapping]) -> str:
    if isinstance(method_info, Mapping):
        method_info = MethodInfo(
            resource_name=method_info.get("resource_name"),
            http_method=method_info.get("http_method", "GET")
        )
    return template_method_name(
        resource_name=method_info.resource_name,
        http_method=method_info.http_method
    )


def template_deployment(
    deployment_uid: str,
    depends_on_methods: Iterable[Union[MethodInfo, Mapping]],
    date: Union[str, datetime]
) -> Dict:
    """
    Deployment created only after the given methods exist.

    ``date`` ends up in the description; pass it explicitly so the same
    inputs always render the same template.
    """
    if isinstance(date, datetime):
        date = date.isoformat()
    depends_on = [_method_name_of(method_info) for method_info in depends_on_methods]
    logger.debug(f"deployment:{deployment_uid} depends_on:{depends_on}")
    return {
        template_deployment_name(deployment_uid): {
            "DependsOn": depends_on,
            "Type": "AWS::ApiGateway::Deployment",
            "Properties": {
                "RestApiId": _rest_api_ref(),
                "Description": f"Automated deployment on {date}",
                # Required by API Gateway, the stage itself is never used
                "StageName": "dummy"
            }
        }
    }


def template_stage(
    stage_name: str,
    deployment_uid: str = None,
    stage_variables: Mapping = None
) -> Dict:
    """
    Stage of the API deployed by the ``InnerStack`` nested stack.

    The rest API and deployment ids are read from the nested stack outputs;
    ``deployment_uid`` only identifies the deployment in the logs.
    """
    logger.debug(f"stage:{stage_name} deployment:{deployment_uid}")
    return {
        template_stage_name(stage_name): {
            "Type": "AWS::ApiGateway::Stage",
            "Properties": {
                "CacheClusterEnabled": False,
                "DeploymentId": {"Fn::GetAtt": [INNER_STACK_NAME, "Outputs.DeploymentId"]},
                "Description": f"{stage_name} Stage",
                "RestApiId": {"Fn::GetAtt": [INNER_STACK_NAME, "Outputs.RestApiId"]},
                "StageName": stage_name,
                "Variables": dict(stage_variables or {})
            }
        }
    }
