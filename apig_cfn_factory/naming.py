"""
Logical ID conventions for the API Gateway template partials
"""


def capitalize_first(token: str) -> str:
    """ Upper-case the first character, keep the rest verbatim """
    return token[:1].upper() + token[1:]


def template_api_id() -> str:
    return "API"


def template_resource_name(resource_name: str) -> str:
    return f"Resource{resource_name}"


def template_method_name(resource_name: str = None, http_method: str = "GET") -> str:
    # A method without a resource is bound to the API root
    return f"Method{resource_name or 'Root'}{http_method}"


def template_stage_name(stage_name: str) -> str:
    return f"Stage{stage_name}"


def template_deployment_name(deployment_uid: str) -> str:
    return f"Deployment{deployment_uid}"


def template_model_name(model_name: str) -> str:
    return f"Model{model_name}"


def template_lambda_name(lambda_name: str) -> str:
    """
    Default logical ID of a backend function.

    The function templates live outside this package; callers owning them
    pass their own namer to the method builders.
    """
    return f"Lambda{lambda_name}"
