from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallCtx
from ..errors import ServiceEnableWarning, record_warning
from ..lib.services import enable_services, enable_user_service, failure_count
from ..logging_utils import log_success

logger = logging.getLogger(__name__)


class EnableServicesStep:
    step_id = "70_enable_services"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Enabling essential system services...")
        results = enable_services(ctx.runner, ctx.cfg.services, start=ctx.cfg.start_services)
        failures = failure_count(results)

        if failures == 0:
            log_success(logger, "All available system services enabled")
        elif failures <= 2:
            record_warning(
                state, ServiceEnableWarning(f"{failures} service(s) failed to enable. This is usually not critical.")
            )
        else:
            record_warning(
                state,
                ServiceEnableWarning(
                    f"{failures} service(s) failed to enable. You may need to enable them manually later."
                ),
            )

        user_results = {name: enable_user_service(ctx.runner, name) for name in ctx.cfg.user_services}
        for name, ok in user_results.items():
            if not ok:
                logger.info("User service %s could not be enabled now", name)

        exe_results = state.setdefault("execution", {}).setdefault("results", {})
        exe_results["services"] = {name: r.value for name, r in results}
        exe_results["service_failures"] = failures
        exe_results["user_services"] = user_results
        return state
