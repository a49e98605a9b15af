# -*- coding: utf-8 -*-


import json
import logging
import os


class global_args:
    """ Global statics """
    OWNER = "Mystique"
    ENVIRONMENT = "production"
    MODULE_NAME = "echo"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def set_logging(lv=global_args.LOG_LEVEL):
    """ Helper to enable logging """
    logging.basicConfig()
    logger = logging.getLogger()
    logger.setLevel(level=lv)
    return logger


# Initial some defaults in global context to reduce lambda start time, when re-using container
logger = set_logging()


def lambda_handler(event, context):
    logger.debug(f"recvd_event:{event}")

    # Envelope built by the integration request template
    params = event.get("params", {})
    expected = event.get("meta", {}).get("expectedResponseContentType", "application/json")

    if "text/html" in expected:
        msg = {"html": f"<html><body><pre>{json.dumps(params)}</pre></body></html>"}
    else:
        msg = {"response": json.dumps({"params": params, "body": event.get("body")})}

    logger.info(f"{msg}")

    return msg
