#!/usr/bin/env python3

import datetime

import aws_cdk as core

from apig_cfn_factory.config import GlobalArgs, api_definition_from_context, set_logging
from apig_cfn_factory.stacks.back_end.api_gw_template_stack import ApiStageStack


logger = set_logging()

app = core.App()

api_definition = api_definition_from_context(app.node)
deployment_date = app.node.try_get_context("deployment_date") or \
    datetime.datetime.now(datetime.timezone.utc).isoformat()


# The API GW Stage, with the Resources, Methods and Deployment as a nested stack
api_stage = ApiStageStack(
    app,
    "apig-cfn-factory",
    api_definition=api_definition,
    deployment_date=deployment_date,
    description="The API GW Stage"
)

# Stack Level Tagging
core.Tags.of(app).add(key="Owner",
                      value=app.node.try_get_context("owner") or GlobalArgs.OWNER)
core.Tags.of(app).add(key="GithubRepo",
                      value=app.node.try_get_context("github_repo_url") or GlobalArgs.SOURCE_INFO)
core.Tags.of(app).add(key="Environment",
                      value=app.node.try_get_context("environment") or GlobalArgs.ENVIRONMENT)

app.synth()
