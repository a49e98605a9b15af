import logging
from pathlib import Path

import aws_cdk as core
from aws_cdk import aws_lambda as _lambda
from constructs import Construct

from apig_cfn_factory.config import GlobalArgs
from apig_cfn_factory.factories.apig import (
    INNER_STACK_NAME,
    MethodInfo,
    template_deployment,
    template_method,
    template_resource_helper,
    template_rest,
    template_stage,
)
from apig_cfn_factory.naming import template_api_id, template_deployment_name, template_lambda_name
from apig_cfn_factory.template_partial import merge_partials

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA_SRC = Path(__file__).parent / "lambda_src" / "echo.py"


def materialize_partial(scope: Construct, template_partial: dict) -> dict:
    """
    Add one raw CloudFormation resource per template partial entry, keeping
    the entry name as logical id and its DependsOn list as given.
    """
    resources = {}
    for logical_id, definition in template_partial.items():
        cfn_resource = core.CfnResource(
            scope,
            logical_id,
            type=definition["Type"],
            properties=definition.get("Properties")
        )
        cfn_resource.override_logical_id(logical_id)
        if definition.get("DependsOn"):
            cfn_resource.add_override("DependsOn", list(definition["DependsOn"]))
        resources[logical_id] = cfn_resource
    return resources


def _read_lambda_code(code_path) -> str:
    try:
        with open(code_path or DEFAULT_LAMBDA_SRC, mode="r") as f:
            return f.read()
    except OSError as e:
        logger.error(f"Unable to read Lambda Function Code from {code_path or DEFAULT_LAMBDA_SRC}")
        raise e


class ApiGwTemplateStack(core.NestedStack):

    def __init__(
        self,
        scope: Construct,
        id: str,
        api_definition: dict,
        deployment_date: str,
        stack_log_level: str = GlobalArgs.LOG_LEVEL,
        **kwargs
    ) -> None:
        super().__init__(scope, id, **kwargs)

        deployment_uid = api_definition["deployment_uid"]

        # Rest API, then one resource tree and method per route
        partials = [template_rest(app_name=api_definition["app_name"])]
        deployed_methods = []
        backend_code_paths = {}
        for route in api_definition["routes"]:
            resource_tree = template_resource_helper(route["path"])
            partials.append(resource_tree.template_partial)
            partials.append(
                template_method(
                    resource_name=resource_tree.resource_name,
                    http_method=route["http_method"],
                    lambda_name=route["lambda_name"],
                    response_content_type=route["response_content_type"]
                )
            )
            deployed_methods.append(
                MethodInfo(resource_tree.resource_name, route["http_method"])
            )
            if route["lambda_name"]:
                backend_code_paths.setdefault(route["lambda_name"], route.get("code_path"))

        # The deployment must wait for every method
        partials.append(
            template_deployment(
                deployment_uid=deployment_uid,
                depends_on_methods=deployed_methods,
                date=deployment_date
            )
        )

        self.template_partial = merge_partials(*partials)
        self.resources = materialize_partial(self, self.template_partial)

        # Backend functions, named the way the method integrations reference them
        self.functions = {}
        for lambda_name, code_path in backend_code_paths.items():
            backend_fn = _lambda.Function(
                self,
                f"{lambda_name}Fn",
                runtime=_lambda.Runtime.PYTHON_3_12,
                handler="index.lambda_handler",
                code=_lambda.InlineCode(_read_lambda_code(code_path)),
                timeout=core.Duration.seconds(15),
                environment={
                    "LOG_LEVEL": f"{stack_log_level}"
                }
            )
            backend_fn.node.default_child.override_logical_id(template_lambda_name(lambda_name))
            self.functions[lambda_name] = backend_fn

        logger.info(
            f"api_stack:{id} resources:{len(self.resources)} methods:{len(deployed_methods)} "
            f"functions:{len(self.functions)}"
        )

        # Outputs
        output_1 = core.CfnOutput(
            self,
            "RestApiIdOutput",
            value=core.Fn.ref(template_api_id()),
            description="Id of the REST API, consumed by the stage."
        )
        output_1.override_logical_id("RestApiId")
        output_2 = core.CfnOutput(
            self,
            "DeploymentIdOutput",
            value=core.Fn.ref(template_deployment_name(deployment_uid)),
            description="Id of the API deployment, consumed by the stage."
        )
        output_2.override_logical_id("DeploymentId")


class ApiStageStack(core.Stack):

    def __init__(
        self,
        scope: Construct,
        id: str,
        api_definition: dict,
        deployment_date: str,
        **kwargs
    ) -> None:
        super().__init__(scope, id, **kwargs)

        # The API, nested, so its outputs can be read by the stage
        self.api_template = ApiGwTemplateStack(
            self,
            "ApiTemplate",
            api_definition=api_definition,
            deployment_date=deployment_date
        )
        self.api_template.nested_stack_resource.override_logical_id(INNER_STACK_NAME)

        self.template_partial = template_stage(
            stage_name=api_definition["stage_name"],
            deployment_uid=api_definition["deployment_uid"],
            stage_variables=api_definition["stage_variables"]
        )
        self.resources = materialize_partial(self, self.template_partial)
        logger.info(f"stage_stack:{id} stage:{api_definition['stage_name']}")
