"""Long-running Firecrawl agent jobs.

The agent takes a natural-language prompt, optionally focused on a list of
URLs, and searches the web on its own. Jobs are submitted and polled with
the machinery in ``shopscan.firecrawl``.
"""

import logging
from typing import Any, Dict, List, Optional

from shopscan.constants import AGENT_MIN_PROMPT_LENGTH, FIRECRAWL_AGENT_URL
from shopscan.firecrawl import MISSING_KEY_ERROR, FirecrawlJobClient
from shopscan.models import AgentJobResult, ErrorKind

logger = logging.getLogger(__name__)

PROMPT_PREVIEW_LENGTH = 100


class FirecrawlAgent(FirecrawlJobClient):
    """Runs agent jobs against the Firecrawl v2 agent API."""

    def run(self, prompt: str, urls: Optional[List[str]] = None) -> AgentJobResult:
        """Submit a job and wait for its result.

        Args:
            prompt: Natural-language description of what to find
            urls: Optional URLs to focus the agent on

        Returns:
            AgentJobResult in a terminal state; never raises
        """
        if not prompt or not prompt.strip():
            return self._failed(
                "A prompt describing what you want to find is required", ErrorKind.VALIDATION
            )
        if len(prompt) < AGENT_MIN_PROMPT_LENGTH:
            return self._failed(
                f"Prompt must be at least {AGENT_MIN_PROMPT_LENGTH} characters", ErrorKind.VALIDATION
            )

        api_key = self.api_key()
        if not api_key:
            return self._failed(MISSING_KEY_ERROR, ErrorKind.CONFIGURATION)

        url_list = [url.strip() for url in urls or [] if url and url.strip()] or None

        return self._guarded_job("Agent", self._run_job, api_key, prompt, url_list)

    def _run_job(self, start: float, api_key: str, prompt: str, urls: Optional[List[str]]) -> AgentJobResult:
        preview = prompt[:PROMPT_PREVIEW_LENGTH]
        logger.info(f"Starting agent job: {preview}{'...' if len(prompt) > PROMPT_PREVIEW_LENGTH else ''}")
        if urls:
            logger.info(f"Agent URLs: {urls}")

        body: Dict[str, Any] = {"prompt": prompt}
        if urls:
            body["urls"] = urls

        submission = self._request("Agent", "POST", FIRECRAWL_AGENT_URL, json=body, headers=self._headers(api_key))
        return self._await_job(
            "Agent", api_key, submission, FIRECRAWL_AGENT_URL, start, "try again with a simpler query"
        )
