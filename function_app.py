
import os
import logging
import azure.functions as func

from launchos.function_blueprints.http_plans import bp as plans_bp

app = func.FunctionApp()


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.cosmos").setLevel(level)
    logging.getLogger("launchos").setLevel(logging.INFO)


_configure_logging()

app.register_functions(plans_bp)
