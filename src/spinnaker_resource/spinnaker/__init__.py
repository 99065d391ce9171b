from typing import Any

import aiohttp
import pydantic
from pydantic import TypeAdapter
from sanic.log import logger

from spinnaker_resource import metrics
from spinnaker_resource.config import Config
from spinnaker_resource.exceptions import DecodeError, NotFoundError, RemoteAPIError
from spinnaker_resource.spinnaker.auth import AuthProvider, auth_provider_for
from spinnaker_resource.spinnaker.models import (
    PipelineConfig,
    PipelineExecution,
    TriggerResponse,
)

EXECUTIONS_LIMIT = 25

_pipeline_configs = TypeAdapter(list[PipelineConfig])
_pipeline_executions = TypeAdapter(list[PipelineExecution])
_execution_metadata = TypeAdapter(dict[str, Any])
_trigger_response = TypeAdapter(TriggerResponse)


def _decode(adapter: TypeAdapter, body: bytes, what: str):
    try:
        return adapter.validate_json(body)
    except pydantic.ValidationError as e:
        raise DecodeError(f"could not decode {what}: {e}") from e


class SpinnakerClient:
    def __init__(self, session: aiohttp.ClientSession, config: Config):
        self.session = session
        self.config = config

    @classmethod
    async def create(
        cls, config: Config, auth_provider: AuthProvider | None = None
    ) -> "SpinnakerClient":
        """
        Authenticate against the Gate API and make sure the configured
        application and pipeline exist.

        Args:
            config: The resource configuration
            auth_provider: Overrides the provider selected by ``AUTH_METHOD``

        Returns:
            A client bound to the authenticated session
        """
        if auth_provider is None:
            auth_provider = auth_provider_for(config)

        session = await auth_provider.get_client(config.SPINNAKER_API)
        client = cls(session, config)
        try:
            await client.check_application()
            await client.check_pipeline()
        except Exception:
            await client.close()
            raise
        return client

    async def close(self):
        await self.session.close()

    async def __aenter__(self) -> "SpinnakerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def application(self) -> str:
        return self.config.SPINNAKER_APPLICATION

    @property
    def pipeline(self) -> str:
        return self.config.SPINNAKER_PIPELINE

    def get_application_url(self) -> str:
        return f"{self.config.SPINNAKER_API}/applications/{self.application}"

    def get_execution_url(self, execution_id: str) -> str:
        return f"{self.config.SPINNAKER_API}/pipelines/{execution_id}"

    async def _check_response(
        self, resp: aiohttp.ClientResponse, not_found: str | None = None
    ):
        if not_found is not None and resp.status == 404:
            raise NotFoundError(not_found)
        if resp.status >= 400:
            # a failing read propagates instead of the status error
            body = await resp.text(errors="replace")
            raise RemoteAPIError(resp.status, body)

    async def _get(
        self, url: str, endpoint: str, not_found: str | None = None
    ) -> bytes:
        logger.debug("GET %s", url)
        with metrics.track_spinnaker_api_call(endpoint, "GET"):
            async with self.session.get(url) as resp:
                metrics.record_spinnaker_api_call(endpoint, "GET", resp.status)
                logger.debug("GET %s responded with %d", url, resp.status)
                await self._check_response(resp, not_found)
                return await resp.read()

    async def _post(self, url: str, endpoint: str, body: bytes) -> bytes:
        logger.debug("POST %s", url)
        with metrics.track_spinnaker_api_call(endpoint, "POST"):
            async with self.session.post(
                url, data=body, headers={"Content-Type": "application/json"}
            ) as resp:
                metrics.record_spinnaker_api_call(endpoint, "POST", resp.status)
                logger.debug("POST %s responded with %d", url, resp.status)
                await self._check_response(resp)
                return await resp.read()

    async def check_application(self):
        logger.debug("Checking that application %s exists", self.application)
        await self._get(
            self.get_application_url(),
            "/applications/{application}",
            not_found=f"spinnaker application {self.application} not found",
        )

    async def check_pipeline(self):
        logger.debug(
            "Checking that pipeline %s exists in application %s",
            self.pipeline,
            self.application,
        )
        body = await self._get(
            f"{self.get_application_url()}/pipelineConfigs",
            "/applications/{application}/pipelineConfigs",
        )
        pipeline_configs = _decode(_pipeline_configs, body, "pipeline configs")

        for pipeline_config in pipeline_configs:
            if pipeline_config.name == self.pipeline:
                return
        raise NotFoundError(f"spinnaker pipeline {self.pipeline} not found")

    async def get_pipeline_execution_raw(self, execution_id: str) -> bytes:
        return await self._get(
            self.get_execution_url(execution_id),
            "/pipelines/{id}",
            not_found=f"pipeline execution ID not found (ID: {execution_id})",
        )

    async def get_pipeline_execution(self, execution_id: str) -> dict[str, Any]:
        body = await self.get_pipeline_execution_raw(execution_id)
        return _decode(_execution_metadata, body, "pipeline execution")

    async def get_pipeline_executions(self) -> list[PipelineExecution]:
        """Return the last 25 executions of the application."""
        body = await self._get(
            f"{self.get_application_url()}/pipelines?limit={EXECUTIONS_LIMIT}",
            "/applications/{application}/pipelines",
        )
        return _decode(_pipeline_executions, body, "pipeline executions")

    async def invoke_pipeline_execution(self, body: bytes) -> PipelineExecution:
        url = f"{self.config.SPINNAKER_API}/pipelines/{self.application}/{self.pipeline}"
        logger.debug("Triggering pipeline %s of %s", self.pipeline, self.application)
        response = await self._post(url, "/pipelines/{application}/{pipeline}", body)
        trigger = _decode(_trigger_response, response, "trigger response")

        metrics.record_execution_triggered(self.application, self.pipeline)
        logger.debug("Triggered pipeline execution %s", trigger.execution_id)
        return PipelineExecution(id=trigger.execution_id)
