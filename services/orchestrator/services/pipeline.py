"""
Orchestration Pipeline - Service Layer

Standardizes the flow for one inbound request:

    ResolveConfig -> ExtractValues -> (AcquireToken)? -> BuildRequest
        -> Dispatch -> TransformResponse -> Done

Every step either completes or yields a StepFailure. The first failure ends
the run (no retries) and is rendered as the error envelope, with the status
taken from STATUS_BY_KIND.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from services.common.core.request_context import get_request_id
from services.orchestrator.core.exceptions import (
    STATUS_BY_KIND,
    ErrorKind,
    InvalidRequestError,
    classify_error,
    error_envelope,
)
from services.orchestrator.core.extractor import ValueExtractor
from services.orchestrator.core.request_builder import RequestBuilder, validate_required
from services.orchestrator.core.response_transformer import ResponseTransformer
from services.orchestrator.models.context import RequestContext
from services.orchestrator.models.result import OrchestrationResult
from services.orchestrator.services.auth_client import AuthClient
from services.orchestrator.services.endpoint_registry import EndpointRegistry
from services.orchestrator.services.upstream_client import UpstreamClient

logger = logging.getLogger("orchestrator.pipeline")


class PipelineStep(str, Enum):
    RESOLVE_CONFIG = "ResolveConfig"
    EXTRACT_VALUES = "ExtractValues"
    ACQUIRE_TOKEN = "AcquireToken"
    BUILD_REQUEST = "BuildRequest"
    DISPATCH = "Dispatch"
    TRANSFORM_RESPONSE = "TransformResponse"
    DONE = "Done"
    FAILED = "Failed"


@dataclass(frozen=True)
class StepFailure:
    """Outcome of a step that did not complete."""

    step: PipelineStep
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


StepHandler = Callable[[RequestContext], Awaitable[None]]


def parse_document(body: bytes):
    """
    Parse the caller body. An empty body is an empty object.

    Raises:
        InvalidRequestError: body is not a JSON object
    """
    if not body or not body.strip():
        return {}
    try:
        document = json.loads(body)
    except ValueError as e:
        raise InvalidRequestError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return document


class OrchestrationPipeline:
    """
    Orchestrates the request processing lifecycle.

    Holds no per-request state; every run owns its RequestContext.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        auth_client: AuthClient,
        upstream_client: UpstreamClient,
        request_builder: RequestBuilder,
        extractor: Optional[ValueExtractor] = None,
        transformer: Optional[ResponseTransformer] = None,
    ):
        self.registry = registry
        self.auth_client = auth_client
        self.upstream_client = upstream_client
        self.request_builder = request_builder
        self.extractor = extractor or ValueExtractor()
        self.transformer = transformer or ResponseTransformer()

    def _steps(self) -> List[Tuple[PipelineStep, StepHandler]]:
        return [
            (PipelineStep.RESOLVE_CONFIG, self._resolve_config),
            (PipelineStep.EXTRACT_VALUES, self._extract_values),
            (PipelineStep.ACQUIRE_TOKEN, self._acquire_token),
            (PipelineStep.BUILD_REQUEST, self._build_request),
            (PipelineStep.DISPATCH, self._dispatch),
            (PipelineStep.TRANSFORM_RESPONSE, self._transform_response),
        ]

    async def run(
        self, endpoint_name: str, body: bytes, request_id: Optional[str] = None
    ) -> OrchestrationResult:
        """
        Process one request from raw caller body to OrchestrationResult.

        Never raises for request-level failures.
        """
        context = RequestContext(
            endpoint_name=endpoint_name,
            original_body=body or b"",
            request_id=request_id or get_request_id(),
        )
        logger.info(
            f"Starting orchestration for endpoint '{endpoint_name}'",
            extra={"endpoint": endpoint_name, "request_id": context.request_id},
        )

        for step, handler in self._steps():
            if step is PipelineStep.ACQUIRE_TOKEN and not context.endpoint.upstream.requires_auth:
                continue
            failure = await self._run_step(step, handler, context)
            if failure is not None:
                return self._fail(context, failure)

        return self._succeed(context)

    async def _run_step(
        self, step: PipelineStep, handler: StepHandler, context: RequestContext
    ) -> Optional[StepFailure]:
        logger.debug(
            f"Entering step {step.value}",
            extra={
                "step": step.value,
                "endpoint": context.endpoint_name,
                "request_id": context.request_id,
            },
        )
        # CancelledError is a BaseException and propagates to the caller
        # instead of becoming a StepFailure.
        try:
            await handler(context)
        except Exception as e:
            kind = classify_error(e)
            logger.error(
                f"Orchestration error at {step.value}: {e}",
                exc_info=True,
                extra={
                    "step": step.value,
                    "endpoint": context.endpoint_name,
                    "request_id": context.request_id,
                    "error_type": kind.value,
                },
            )
            return StepFailure(step=step, kind=kind, message=str(e) or kind.value)
        return None

    # ===========================================
    # Steps
    # ===========================================

    async def _resolve_config(self, context: RequestContext) -> None:
        context.endpoint = self.registry.lookup(context.endpoint_name)
        upstream = context.endpoint.upstream
        logger.debug(
            f"Endpoint configuration resolved: method={upstream.method}, "
            f"path={upstream.path_template}, requiresAuth={upstream.requires_auth}"
        )

    async def _extract_values(self, context: RequestContext) -> None:
        context.document = parse_document(context.original_body)
        context.extracted_values = self.extractor.extract(
            context.document, context.endpoint.mapping.input
        )
        # Required fields are checked before any external call is made.
        validate_required(context.endpoint, context.extracted_values)

    async def _acquire_token(self, context: RequestContext) -> None:
        token = await self.auth_client.acquire_token()
        context.attach_token(token)

    async def _build_request(self, context: RequestContext) -> None:
        context.upstream_request = self.request_builder.build(
            context.endpoint,
            context.extracted_values,
            auth_token=context.auth_token,
            original_body=context.original_body,
        )
        logger.info(f"Transformed URL: {context.target_url}")

    async def _dispatch(self, context: RequestContext) -> None:
        response = await self.upstream_client.send(context.upstream_request)
        context.upstream_status = response.status_code
        context.upstream_headers = dict(response.headers)
        context.upstream_body = response.content

    async def _transform_response(self, context: RequestContext) -> None:
        transformed = self.transformer.transform(
            context.endpoint.response,
            context.upstream_body,
            context.upstream_headers,
            context.extracted_values,
        )
        context.response_payload = transformed.content

    # ===========================================
    # Terminal states
    # ===========================================

    def _succeed(self, context: RequestContext) -> OrchestrationResult:
        logger.info(
            "Orchestration completed successfully",
            extra={
                "step": PipelineStep.DONE.value,
                "endpoint": context.endpoint_name,
                "request_id": context.request_id,
            },
        )
        return OrchestrationResult(
            success=True, status_code=200, payload=context.response_payload
        )

    def _fail(self, context: RequestContext, failure: StepFailure) -> OrchestrationResult:
        envelope = error_envelope(failure.kind, failure.message)
        logger.info(
            f"Orchestration failed at {failure.step.value} with {failure.kind.value}",
            extra={
                "step": PipelineStep.FAILED.value,
                "failed_step": failure.step.value,
                "endpoint": context.endpoint_name,
                "request_id": context.request_id,
                "status": failure.status_code,
            },
        )
        return OrchestrationResult(
            success=False,
            status_code=failure.status_code,
            payload=json.dumps(envelope, ensure_ascii=False).encode("utf-8"),
            error_kind=failure.kind.value,
            error=failure.message,
        )
