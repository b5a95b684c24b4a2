from __future__ import annotations

import logging

logger = logging.getLogger(__name__)
_CONFIGURED = False


def init_azure_monitor(connection_string: str) -> bool:
    global _CONFIGURED
    if _CONFIGURED:
        return True
    if not connection_string:
        logger.info("APPLICATIONINSIGHTS_CONNECTION_STRING not set; OTel disabled")
        return False
    from azure.monitor.opentelemetry import configure_azure_monitor

    configure_azure_monitor(connection_string=connection_string)
    logger.info("Azure Monitor OpenTelemetry configured")
    _CONFIGURED = True
    return True
