# -*- coding: utf-8 -*-

import logging
import os

from apig_cfn_factory.errors import ConfigurationError


class GlobalArgs:
    """
    Helper to define global statics
    """

    OWNER = "MystiqueAutomation"
    ENVIRONMENT = "production"
    REPO_NAME = "apig-cfn-factory"
    SOURCE_INFO = f"https://github.com/miztiik/{REPO_NAME}"
    VERSION = "2026_10_18"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def set_logging(lv=GlobalArgs.LOG_LEVEL):
    """ Helper to enable logging """
    logging.basicConfig()
    logger = logging.getLogger()
    logger.setLevel(level=lv)
    return logger


logger = logging.getLogger(__name__)

DEFAULT_API_DEFINITION = {
    "app_name": "App",
    "deployment_uid": "Initial",
    "stage_name": "prod",
    "stage_variables": {},
    "routes": [],
}

DEFAULT_ROUTE = {
    "path": "",
    "http_method": "GET",
    "lambda_name": None,
    "code_path": None,
}


def _normalize_route(route, idx):
    if not isinstance(route, dict):
        raise ConfigurationError(f"Route {idx}: expected an object, got {type(route).__name__}")
    if not route.get("response_content_type"):
        raise ConfigurationError(f"Route {idx}: missing required field 'response_content_type'")
    normalized = {**DEFAULT_ROUTE, **route}
    if not isinstance(normalized["path"], str):
        raise ConfigurationError(f"Route {idx}: 'path' must be a string")
    if not isinstance(normalized["http_method"], str) or not normalized["http_method"]:
        raise ConfigurationError(f"Route {idx}: 'http_method' must be a non-empty string")
    if normalized["lambda_name"] is not None and not isinstance(normalized["lambda_name"], str):
        raise ConfigurationError(f"Route {idx}: 'lambda_name' must be a string")
    if normalized["code_path"] is not None and not isinstance(normalized["code_path"], str):
        raise ConfigurationError(f"Route {idx}: 'code_path' must be a string")
    normalized["http_method"] = normalized["http_method"].upper()
    return normalized


def api_definition_from_context(node):
    """
    Read the API definition from the `api` key of the CDK context (``cdk.json``)

    Returns:
        Dictionary with the keys of ``DEFAULT_API_DEFINITION``, each route
        normalized to ``path``, ``http_method``, ``lambda_name``,
        ``code_path`` and ``response_content_type``.
    """
    api_context = node.try_get_context("api") or {}
    if not isinstance(api_context, dict):
        raise ConfigurationError("Context key 'api' must be an object")

    api_definition = {**DEFAULT_API_DEFINITION, **api_context}
    api_definition["routes"] = [
        _normalize_route(route, idx)
        for idx, route in enumerate(api_definition["routes"], start=1)
    ]
    logger.info(
        f"Loaded API definition for {api_definition['app_name']} "
        f"with {len(api_definition['routes'])} routes"
    )
    return api_definition
