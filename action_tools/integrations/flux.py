"""
Flux image generation tool (Black Forest Labs API).

Generation is asynchronous on the remote side: each image is submitted as a
task and its result endpoint is polled until the task is ready. Images are
produced one at a time, and the first failure ends the batch.
"""
from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import Field

from action_tools.tools.action import ActionTool, InvocationContext, action
from action_tools.tools.credentials import StaticKey
from action_tools.tools.exceptions import ToolCredentialsMissingError, ToolExecutionError, ToolResponseError
from action_tools.tools.http import RestClient, require
from action_tools.tools.polling import poll_until
from action_tools.tools.schema import ActionRequest, AllOf
from utils.logger import get_logger

logger = get_logger(__name__)

RESULT_PATH = "/v1/get_result"
READY = "Ready"
FAILED_STATES = frozenset({"Error", "Content Moderated", "Request Moderated", "Task not found"})
MAX_IMAGES = 24


class FluxRequest(ActionRequest):
    action: Literal["generate"] = "generate"
    prompt: Optional[str] = Field(None, min_length=1, description="Text prompt for image generation.")
    width: int = Field(1024, ge=256, le=1440, multiple_of=32, description="Image width in pixels, a multiple of 32.")
    height: int = Field(768, ge=256, le=1440, multiple_of=32, description="Image height in pixels, a multiple of 32.")
    prompt_upsampling: bool = Field(False, description="Whether to perform upsampling on the prompt.")
    steps: int = Field(40, ge=1, le=50, description="Number of model steps, 1 to 50.")
    seed: Optional[int] = Field(None, description="Optional seed for reproducibility.")
    safety_tolerance: int = Field(
        6, ge=0, le=6, description="Moderation tolerance, 0 (most strict) to 6 (least strict)."
    )
    output_format: Literal["png", "jpeg"] = Field("png", description="Output format of the image.")
    endpoint: Literal["/v1/flux-pro-1.1", "/v1/flux-pro", "/v1/flux-dev", "/v1/flux-pro-1.1-ultra"] = Field(
        "/v1/flux-pro", description="Model endpoint to use for image generation."
    )
    number_of_images: int = Field(1, ge=1, le=MAX_IMAGES, description="Number of images to generate, up to 24.")
    raw: bool = Field(False, description="Less processed, more natural images. Only for /v1/flux-pro-1.1-ultra.")

    ACTION_RULES: ClassVar = {
        "generate": [AllOf(("prompt",), "Missing required field: prompt")],
    }


def wrap_in_markdown(image_url: str) -> str:
    return f"![generated image]({image_url})"


class FluxTool(ActionTool):
    """Generate images from text descriptions with Flux."""

    TOOL_ID = "flux"
    request_model = FluxRequest
    keywords = ("image", "picture", "generate", "flux", "art", "illustration", "photo")

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = "https://api.bfl.ml",
        poll_interval: float = 2.0,
        max_wait: float = 300.0,
        output_dir: Optional[str] = None,
        session=None,
        timeout: float = 30.0,
    ):
        api_key = api_key or os.getenv("FLUX_API_KEY")
        if not api_key:
            raise ToolCredentialsMissingError("FLUX_API_KEY", message="Missing FLUX_API_KEY environment variable.")
        super().__init__(StaticKey(api_key))
        self.client = RestClient(
            base_url,
            session=session,
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.output_dir = Path(output_dir) if output_dir else None
        self.name = "Flux"
        self.description = (
            "Generate images from detailed text descriptions. Describe subject, style, composition, "
            "lighting, colour palette and mood in natural language."
        )

    @action("generate")
    def _generate(self, request: FluxRequest, context: InvocationContext) -> Dict[str, Any]:
        payload = {
            "prompt": request.prompt,
            "width": request.width,
            "height": request.height,
            "steps": request.steps,
            "prompt_upsampling": request.prompt_upsampling,
            "seed": request.seed,
            "safety_tolerance": request.safety_tolerance,
            "output_format": request.output_format,
            "raw": request.raw,
        }
        logger.debug(
            "flux_generate",
            endpoint=request.endpoint,
            steps=request.steps,
            number_of_images=request.number_of_images,
            width=request.width,
            height=request.height,
        )

        images: List[Dict[str, Any]] = []
        markdown: List[str] = []
        for index in range(request.number_of_images):
            task_id = self._submit(request.endpoint, payload, context)
            sample = self._wait_for_sample(task_id, context)
            location = self._save(sample, request.output_format) if self.output_dir else sample
            logger.info("flux_image_ready", task_id=task_id, image=index + 1, of=request.number_of_images)
            images.append({"id": task_id, "url": sample})
            markdown.append(wrap_in_markdown(location))

        return {
            "message": f"Generated {len(images)} image(s). The images are shown to the user already; do not repeat links.",
            "images": images,
            "markdown": markdown,
        }

    def _submit(self, endpoint: str, payload: Dict[str, Any], context: InvocationContext) -> str:
        task = self.client.send_json(
            "POST",
            endpoint,
            json=payload,
            headers={"x-key": context.token},
            failure="Something went wrong when trying to generate the image. The Flux API may be unavailable",
        )
        return require(task, "id", context="Flux task submission")

    def _wait_for_sample(self, task_id: str, context: InvocationContext) -> str:
        def fetch() -> Dict[str, Any]:
            result = self.client.send_json(
                "GET",
                RESULT_PATH,
                params={"id": task_id},
                headers={"x-key": context.token},
                failure="An error occurred while retrieving the image",
            )
            logger.debug("flux_poll", task_id=task_id, status=result.get("status"))
            return result

        result = poll_until(
            fetch,
            lambda data: data.get("status") == READY or data.get("status") in FAILED_STATES,
            interval=self.poll_interval,
            max_wait=self.max_wait,
            cancel=context.cancel,
        )
        if result.get("status") != READY:
            raise ToolExecutionError(f"An error occurred during image generation: {result.get('status')}")
        sample = (result.get("result") or {}).get("sample")
        if not sample:
            raise ToolResponseError("No image data received from Flux API.")
        return sample

    def _save(self, image_url: str, output_format: str) -> str:
        response = self.client.send("GET", image_url, failure="Failed to download the image")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"img-{uuid.uuid4()}.{output_format}"
        path.write_bytes(response.content)
        logger.debug("flux_image_saved", path=str(path))
        return str(path)
