import json
import threading

import pytest

from action_tools.integrations.flux import FluxTool
from action_tools.tools.exceptions import ToolCredentialsMissingError

BASE = "https://flux.test"


@pytest.fixture
def flux(session):
    return FluxTool("flux-key", base_url=BASE, poll_interval=0, max_wait=5, session=session)


def _invoke(tool, request, **kwargs):
    return json.loads(tool.invoke(request, **kwargs))


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("FLUX_API_KEY", raising=False)

    with pytest.raises(ToolCredentialsMissingError, match="Missing FLUX_API_KEY"):
        FluxTool()


def test_generates_one_image_with_defaults(flux, session, ok):
    session.queue(
        ok({"id": "task-1"}),
        ok({"status": "Pending"}),
        ok({"status": "Ready", "result": {"sample": "https://cdn.test/a.png"}}),
    )

    result = _invoke(flux, {"prompt": "A lake at dawn"})

    assert result["images"] == [{"id": "task-1", "url": "https://cdn.test/a.png"}]
    assert result["markdown"] == ["![generated image](https://cdn.test/a.png)"]

    submit = session.calls[0]
    assert submit["method"] == "POST"
    assert submit["url"] == f"{BASE}/v1/flux-pro"
    assert submit["headers"]["x-key"] == "flux-key"
    assert submit["json"] == {
        "prompt": "A lake at dawn",
        "width": 1024,
        "height": 768,
        "steps": 40,
        "prompt_upsampling": False,
        "seed": None,
        "safety_tolerance": 6,
        "output_format": "png",
        "raw": False,
    }
    poll = session.calls[1]
    assert poll["url"] == f"{BASE}/v1/get_result"
    assert poll["params"] == {"id": "task-1"}


def test_images_are_generated_one_at_a_time(flux, session, ok):
    session.queue(
        ok({"id": "t1"}),
        ok({"status": "Ready", "result": {"sample": "https://cdn.test/1.png"}}),
        ok({"id": "t2"}),
        ok({"status": "Ready", "result": {"sample": "https://cdn.test/2.png"}}),
    )

    result = _invoke(flux, {"prompt": "Cats", "number_of_images": 2, "endpoint": "/v1/flux-dev"})

    assert [image["id"] for image in result["images"]] == ["t1", "t2"]
    assert [call["method"] for call in session.calls] == ["POST", "GET", "POST", "GET"]
    assert session.calls[2]["url"] == f"{BASE}/v1/flux-dev"


def test_failure_on_first_image_stops_the_batch(flux, session, ok):
    session.queue(ok({"id": "t1"}), ok({"status": "Content Moderated"}))

    result = _invoke(flux, {"prompt": "Cats", "number_of_images": 3})

    assert result == {"error": "An error occurred during image generation: Content Moderated"}
    assert len(session.calls) == 2


def test_failure_mid_batch_discards_earlier_images(flux, session, ok):
    session.queue(
        ok({"id": "t1"}),
        ok({"status": "Ready", "result": {"sample": "https://cdn.test/1.png"}}),
        ok({"id": "t2"}),
        ok({"status": "Error"}),
    )

    result = _invoke(flux, {"prompt": "Cats", "number_of_images": 3})

    assert result == {"error": "An error occurred during image generation: Error"}
    submits = [call for call in session.calls if call["method"] == "POST"]
    assert len(submits) == 2
    assert session.responses == []


def test_submission_error(flux, session, fail):
    session.queue(fail(402, "Insufficient credits"))

    result = _invoke(flux, {"prompt": "Cats"})

    assert "Insufficient credits" in result["error"]
    assert "status 402" in result["error"]


def test_ready_without_sample(flux, session, ok):
    session.queue(ok({"id": "t1"}), ok({"status": "Ready", "result": {}}))

    assert _invoke(flux, {"prompt": "Cats"}) == {"error": "No image data received from Flux API."}


def test_polling_times_out(session, ok):
    tool = FluxTool("flux-key", base_url=BASE, poll_interval=0.01, max_wait=0.05, session=session)
    session.queue(ok({"id": "t1"}), *[ok({"status": "Pending"}) for _ in range(50)])

    result = _invoke(tool, {"prompt": "Cats"})

    assert result["error"].startswith("Timed out after")


def test_polling_honours_cancellation(flux, session, ok):
    cancel = threading.Event()
    cancel.set()
    session.queue(ok({"id": "t1"}))

    result = _invoke(flux, {"prompt": "Cats"}, cancel=cancel)

    assert result == {"error": "Cancelled while waiting for the job to finish"}
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    "request_",
    [
        {"width": 1024},
        {"prompt": "Cats", "width": 1000},
        {"prompt": "Cats", "steps": 80},
        {"prompt": "Cats", "number_of_images": 25},
        {"prompt": "Cats", "endpoint": "/v1/unknown"},
    ],
)
def test_invalid_requests_make_no_calls(flux, session, request_):
    result = _invoke(flux, request_)

    assert "error" in result
    assert session.calls == []


def test_saves_images_when_output_dir_is_configured(tmp_path, session, ok):
    tool = FluxTool("flux-key", base_url=BASE, poll_interval=0, max_wait=5, output_dir=str(tmp_path), session=session)
    session.queue(
        ok({"id": "t1"}),
        ok({"status": "Ready", "result": {"sample": "https://cdn.test/a.png"}}),
        ok(content=b"PNGDATA"),
    )

    result = _invoke(tool, {"prompt": "Cats"})

    saved = list(tmp_path.glob("img-*.png"))
    assert len(saved) == 1
    assert saved[0].read_bytes() == b"PNGDATA"
    assert result["markdown"] == [f"![generated image]({saved[0]})"]
    assert "x-key" not in session.last()["headers"]
