"""
Shared fixtures for the template factory tests
"""

import pytest


@pytest.fixture
def api_definition():
    return {
        "app_name": "Square",
        "deployment_uid": "V1",
        "stage_name": "test",
        "stage_variables": {"LOG_LEVEL": "REVCVUc="},
        "routes": [
            {
                "path": "",
                "http_method": "GET",
                "lambda_name": None,
                "response_content_type": "text/html",
            },
            {
                "path": "square/{number}",
                "http_method": "GET",
                "lambda_name": "GetSquare",
                "response_content_type": "application/json",
            },
        ],
    }
