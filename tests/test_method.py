"""
Tests for the method, integration, role and model builders
"""

import pytest

from apig_cfn_factory.errors import ConfigurationError
from apig_cfn_factory.factories import mapping_templates
from apig_cfn_factory.factories.apig import (
    template_invokation_role,
    template_lambda_integration,
    template_method,
    template_mock_integration,
    template_model,
    template_resource_helper,
    template_rest,
)
from apig_cfn_factory.template_partial import merge_partials


class TestTemplateRest:

    def test_defaults(self):
        assert template_rest() == {
            "API": {
                "Type": "AWS::ApiGateway::RestApi",
                "Properties": {"Description": "REST API for App app", "Name": "AppAPI"},
            }
        }

    def test_app_name_and_description(self):
        props = template_rest(app_name="Square", description="Squares")["API"]["Properties"]

        assert props == {"Description": "Squares", "Name": "SquareAPI"}


class TestTemplateModel:

    def test_model(self):
        model = template_model(model_name="HelloWorldModel", model_schema="{}")

        assert model["ModelHelloWorldModel"]["Type"] == "AWS::ApiGateway::Model"
        assert model["ModelHelloWorldModel"]["Properties"] == {
            "ContentType": "application/json",
            "Description": "Model HelloWorldModel",
            "RestApiId": {"Ref": "API"},
            "Schema": "{}",
        }


class TestIntegrations:

    def test_mock_integration(self):
        integration = template_mock_integration()

        assert integration["Type"] == "MOCK"
        assert integration["RequestTemplates"] == {"application/json": '{ "statusCode": 200 }'}
        assert integration["IntegrationResponses"] == [{
            "ResponseTemplates": {"text/html": "Hello World from ApiGateway"},
            "StatusCode": 200,
        }]

    def test_lambda_integration_json(self):
        integration = template_lambda_integration(
            lambda_name="GetSquare", response_content_type="application/json; charset=utf-8"
        )

        assert integration["Type"] == "AWS"
        assert integration["IntegrationHttpMethod"] == "POST"
        assert integration["PassthroughBehavior"] == "NEVER"
        assert integration["Credentials"] == {"Fn::GetAtt": ["APIGExecutionRole", "Arn"]}
        assert integration["IntegrationResponses"] == [{
            "ResponseTemplates": {
                "application/json": "#set($inputRoot = $input.path('$'))\n$inputRoot.response"
            },
            "StatusCode": 200,
        }]
        uri_parts = integration["Uri"]["Fn::Join"][1]
        assert uri_parts[0] == "arn:aws:apigateway:"
        assert uri_parts[1] == {"Ref": "AWS::Region"}
        assert uri_parts[3] == {"Fn::GetAtt": ["LambdaGetSquare", "Arn"]}
        assert uri_parts[4] == "/invocations"

    def test_lambda_integration_html(self):
        integration = template_lambda_integration(
            lambda_name="Page", response_content_type="text/html"
        )

        assert integration["IntegrationResponses"][0]["ResponseTemplates"] == {
            "text/html": "#set($inputRoot = $input.path('$'))\n$inputRoot.html"
        }

    def test_lambda_integration_custom_namer(self):
        integration = template_lambda_integration(
            lambda_name="page",
            response_content_type="text/html",
            lambda_namer=lambda name: f"Function{name.title()}",
        )

        assert integration["Uri"]["Fn::Join"][1][3] == {"Fn::GetAtt": ["FunctionPage", "Arn"]}

    def test_lambda_request_template(self):
        """The request envelope carries params, body, meta and stage variables"""
        integration = template_lambda_integration(
            lambda_name="GetSquare", response_content_type="application/json"
        )
        request_template = integration["RequestTemplates"]["application/json"]

        assert request_template == mapping_templates.lambda_request_template("application/json")
        assert request_template.startswith("#set($allParams = $input.params())\n{\n  \"params\" : {")
        assert request_template.endswith("}")
        assert '"body": $input.json(\'$\'),' in request_template
        assert '"expectedResponseContentType": "application/json"' in request_template
        assert '"$name" : "$util.base64Decode($stageVariables.get($name))"' in request_template

    def test_lambda_integration_unsupported_content_type(self):
        with pytest.raises(ConfigurationError, match="Lambda Integration Response"):
            template_lambda_integration(lambda_name="GetSquare", response_content_type="text/plain")


class TestTemplateMethod:

    def test_mock_method_on_root(self):
        partial = template_method(response_content_type="text/html")

        assert list(partial) == ["APIGExecutionRole", "ModelHelloWorldModel", "MethodRootGET"]
        method = partial["MethodRootGET"]
        assert method["Type"] == "AWS::ApiGateway::Method"
        assert method["Properties"]["ResourceId"] == {"Fn::GetAtt": ["API", "RootResourceId"]}
        assert method["Properties"]["HttpMethod"] == "GET"
        assert method["Properties"]["AuthorizationType"] == "NONE"
        assert method["Properties"]["Integration"]["Type"] == "MOCK"
        assert method["Properties"]["Integration"]["IntegrationResponses"][0]["StatusCode"] == 200
        assert method["Properties"]["MethodResponses"] == [{
            "ResponseModels": {"text/html": {"Ref": "ModelHelloWorldModel"}},
            "StatusCode": 200,
        }]

    def test_lambda_method_on_resource(self):
        partial = template_method(
            resource_name="Number",
            http_method="POST",
            lambda_name="GetSquare",
            response_content_type="application/json",
        )
        method = partial["MethodNumberPOST"]

        assert method["Properties"]["ResourceId"] == {"Ref": "ResourceNumber"}
        assert method["Properties"]["Integration"]["Type"] == "AWS"
        assert method["Properties"]["Integration"]["PassthroughBehavior"] == "NEVER"
        assert method["Properties"]["MethodResponses"][0]["ResponseModels"] == {
            "application/json": {"Ref": "ModelHelloWorldModel"}
        }

    def test_shared_role_and_model(self):
        partial = template_method(response_content_type="text/html")

        assert partial["APIGExecutionRole"] == template_invokation_role()["APIGExecutionRole"]
        assert partial["ModelHelloWorldModel"]["Properties"]["Schema"] == "{}"

    def test_invokation_role(self):
        role = template_invokation_role()["APIGExecutionRole"]

        assert role["Type"] == "AWS::IAM::Role"
        statement = role["Properties"]["AssumeRolePolicyDocument"]["Statement"][0]
        assert statement["Principal"] == {"Service": ["apigateway.amazonaws.com"]}
        policy = role["Properties"]["Policies"][0]
        assert policy["PolicyName"] == "invokeLambda"
        assert policy["PolicyDocument"]["Statement"][0]["Action"] == ["lambda:InvokeFunction"]

    @pytest.mark.parametrize("content_type", ["text/plain", "application/xml", "", None])
    def test_mock_method_unsupported_content_type(self, content_type):
        with pytest.raises(ConfigurationError, match="Lambda Method"):
            template_method(resource_name="Users", response_content_type=content_type)

    def test_lambda_method_unsupported_content_type(self):
        with pytest.raises(ConfigurationError):
            template_method(
                resource_name="Users", lambda_name="ListUsers", response_content_type="text/csv"
            )

    def test_merging_methods_deduplicates_shared_resources(self):
        users = template_resource_helper("users")
        groups = template_resource_helper("groups")
        merged = merge_partials(
            users.template_partial,
            template_method(resource_name=users.resource_name, response_content_type="text/html"),
            groups.template_partial,
            template_method(
                resource_name=groups.resource_name,
                lambda_name="ListGroups",
                response_content_type="application/json",
            ),
        )

        assert list(merged) == [
            "ResourceUsers",
            "APIGExecutionRole",
            "ModelHelloWorldModel",
            "MethodUsersGET",
            "ResourceGroups",
            "MethodGroupsGET",
        ]
