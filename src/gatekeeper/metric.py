import logging

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from gatekeeper import config

logger = logging.getLogger("gatekeeper")

push_registry = CollectorRegistry()

api_call_count = Counter(
    "gatekeeper_num_api_calls",
    "Total number of GitHub API calls",
    labelnames=["endpoint"],
    registry=push_registry,
)

check_run_post = Counter(
    "gatekeeper_check_run_post",
    "Number of check run create/update posts",
    labelnames=["action"],
    registry=push_registry,
)

run_error_count = Counter(
    "gatekeeper_num_run_error",
    "Number of runs that ended with an error",
    registry=push_registry,
)


def _normalize_api_endpoint(endpoint: str) -> str:
    path = endpoint.split("?", 1)[0].split("{", 1)[0]
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) >= 3 and parts[0] == "repos":
        parts = parts[3:]
    if not parts:
        return "other"
    if parts[0] == "contents":
        return "contents/xxx"
    return "/".join(p for p in parts if not p.isdigit())


def record_api_call(endpoint: str) -> None:
    api_call_count.labels(endpoint=_normalize_api_endpoint(endpoint)).inc()


def push_metrics() -> None:
    if config.PUSH_GATEWAY is None:
        return
    logger.debug("Pushing metrics to %s", config.PUSH_GATEWAY)
    try:
        push_to_gateway(config.PUSH_GATEWAY, job="gatekeeper", registry=push_registry)
    except OSError:
        logger.warning(
            "Pushing metrics to %s failed", config.PUSH_GATEWAY, exc_info=True
        )
