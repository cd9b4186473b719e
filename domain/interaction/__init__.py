from .log import InteractionLog, InteractionLogs, InteractionRequest, InteractionSpan, GATEWAY_NAME

__all__ = [
    "GATEWAY_NAME",
    "InteractionLog",
    "InteractionLogs",
    "InteractionRequest",
    "InteractionSpan",
]
