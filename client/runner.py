"""
Full speed test sequence: latency, then download, then upload.

Sub-tests run one after another so that one test's traffic never distorts
another's timing.  Each runs under the configured deadline, and whatever
goes wrong inside one of them is recorded as that sub-test's failure
without stopping the rest.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from .api import ServerEndpoint
from .config import SpeedTestConfig
from .deadline import with_deadline
from .download import DownloadTester
from .errors import DeadlineExceeded, TransportError
from .latency import LatencyTester
from .results import FailureKind, SpeedTestResult, SubTestFailure, SubTestResult
from .upload import UploadTester

logger = logging.getLogger(__name__)


class SpeedTest:
    """Run every sub-test against ``config.server`` and collect the results."""

    def __init__(
        self,
        config: SpeedTestConfig,
        latency: Optional[LatencyTester] = None,
        download: Optional[DownloadTester] = None,
        upload: Optional[UploadTester] = None,
        on_test_start: Optional[Callable[[str], None]] = None,
        on_test_done: Optional[Callable[[str, SubTestResult], None]] = None,
    ) -> None:
        self.config = config
        self.endpoint = ServerEndpoint.from_url(config.server)
        self.tests = {
            "latency": latency or LatencyTester(ping_count=config.ping_count),
            "download": download or DownloadTester(config.download_megabytes),
            "upload": upload or UploadTester(config.upload_megabytes),
        }
        self.on_test_start = on_test_start
        self.on_test_done = on_test_done

    async def run(self) -> SpeedTestResult:
        results: Dict[str, SubTestResult] = {}

        for name, tester in self.tests.items():
            if self.on_test_start:
                self.on_test_start(name)

            results[name] = await self._run_one(name, tester)

            if self.on_test_done:
                self.on_test_done(name, results[name])

        return SpeedTestResult(**results)

    async def _run_one(self, name: str, tester) -> SubTestResult:  # noqa: ANN001
        deadline = self.config.deadline_seconds
        try:
            return await with_deadline(tester.test(self.endpoint), deadline)
        except DeadlineExceeded as exc:
            logger.warning("%s test exceeded its %d s deadline", name.capitalize(), deadline)
            return SubTestFailure(reason=str(exc), kind=FailureKind.DEADLINE)
        except TransportError as exc:
            logger.warning("%s test failed: %s", name.capitalize(), exc)
            return SubTestFailure(reason=str(exc), kind=FailureKind.TRANSPORT)
        except Exception as exc:
            logger.exception("%s test raised an unexpected error", name.capitalize())
            return SubTestFailure(reason=str(exc) or type(exc).__name__, kind=FailureKind.ERROR)


async def run_speedtest(config: SpeedTestConfig) -> SpeedTestResult:
    """Convenience wrapper: run the default sub-tests for *config*."""
    return await SpeedTest(config).run()
