"""
Mutanabi — poem generator in the style of Al Mutanabi
FastAPI front end: validates an Arabic seed word and a length, then asks the
remote generation API for a poem.
"""

from __future__ import annotations

import asyncio
import html
import logging
import os
from datetime import datetime

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

import messages
from clock import Clock
from controller import SubmissionController
from poem_engine import DEFAULT_ENDPOINT, GenerationError, PoemClient
from validation import (
    DEFAULT_POEM_LENGTH,
    FieldError,
    normalize_digits,
    validate,
)

load_dotenv()

VERSION = "1.0.0"


def _env_timeout(name: str) -> float | None:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


POEM_API_URL: str = os.environ.get("POEM_API_URL", DEFAULT_ENDPOINT)
POEM_API_TIMEOUT: float | None = _env_timeout("POEM_API_TIMEOUT")
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("mutanabi")

app = FastAPI(
    title="Mutanabi — Poem Generator",
    description=(
        "Generate an Arabic poem in the style of Al Mutanabi from a single seed "
        "word. Input is validated here; generation is delegated to a remote API."
    ),
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_clock = Clock()


def get_poem_client() -> PoemClient:
    return PoemClient(endpoint=POEM_API_URL, timeout=POEM_API_TIMEOUT)


def get_clock() -> Clock:
    return _clock


class PoemResponse(BaseModel):
    seed: str
    length: int
    poem: str


class ValidationRequest(BaseModel):
    word: str = ""
    count: str = Field("", description="Poem length; Arabic-Indic digits accepted")


class ValidationReport(BaseModel):
    valid: bool
    errors: dict[str, FieldError]
    word: str
    count: str = Field(..., description="Normalized count as it should appear in the form")


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_PAGE_SCRIPT = """
const arabic = /^[\\u0600-\\u06FF\\s]+$/;
const digits = /^[0-9\\u0660-\\u0669]+$/;
const word = document.getElementById("word");
const count = document.getElementById("count");
const submit = document.getElementById("submit");
function refresh() { submit.disabled = !word.value || !count.value; }
async function validateForm() {
  const resp = await fetch("/validate", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({word: word.value, count: count.value}),
  });
  const report = await resp.json();
  count.value = report.count;
  for (const input of [word, count]) {
    const error = report.errors[input.name];
    document.getElementById(input.name + "-error").textContent =
      error ? `${error.primary} / ${error.secondary}` : "";
    input.className = error ? "border-red-500" : "border-gray-300";
  }
  refresh();
}
word.addEventListener("keypress", (e) => { if (!arabic.test(e.key)) e.preventDefault(); });
count.addEventListener("keypress", (e) => { if (!digits.test(e.key)) e.preventDefault(); });
word.addEventListener("input", refresh);
count.addEventListener("input", refresh);
word.addEventListener("blur", validateForm);
count.addEventListener("blur", validateForm);
document.getElementById("poem-form").addEventListener("submit", () => {
  submit.disabled = true;
  submit.textContent = submit.dataset.busy;
});
new EventSource("/clock").onmessage = (e) => {
  document.getElementById("clock").textContent = e.data;
};
"""


CONTACT_LINKS = (
    ("WhatsApp", "https://wa.me/233548336362", "+233548336362"),
    ("Twitter", "https://twitter.com/RidwanIbraheem5", "@RidwanIbraheem5"),
)


def _field_html(
    name: str,
    label: str,
    value: str,
    placeholder: str,
    error: FieldError | None,
    style: str,
) -> str:
    border = "border-red-500" if error else "border-gray-300"
    parts = [
        f'<label class="field">{html.escape(label)}',
        f'<input type="text" id="{name}" name="{name}" value="{html.escape(value)}" '
        f'placeholder="{html.escape(placeholder)}" class="{border}" style="{style}" required>',
    ]
    message = error.display() if error is not None else ""
    parts.append(f'<p class="error" id="{name}-error">{html.escape(message)}</p>')
    parts.append("</label>")
    return "\n".join(parts)


def render_page(controller: SubmissionController, clock_text: str) -> str:
    form = controller.form
    disabled = "" if controller.can_submit else " disabled"
    word_field = _field_html(
        "word", messages.WORD_LABEL, form.word, messages.WORD_PLACEHOLDER,
        form.field_errors.get("word"), "direction: rtl",
    )
    count_field = _field_html(
        "count", messages.COUNT_LABEL, form.count, messages.COUNT_PLACEHOLDER,
        form.field_errors.get("count"), "text-align: right",
    )
    contacts = "\n".join(
        f'<a href="{href}" title="{site}" target="_blank" rel="noopener noreferrer">{html.escape(text)}</a>'
        for site, href, text in CONTACT_LINKS
    )
    output = ""
    if form.result_text:
        output = f'<div class="output"><p>{html.escape(form.result_text)}</p></div>'

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1">
  <title>{html.escape(messages.TITLE.primary)}</title>
  <style>
    body {{ font-family: system-ui, sans-serif; background: #fff; margin: 0; }}
    main {{ max-width: 28rem; margin: 2.5rem auto; padding: 0 1.5rem; }}
    h1 {{ text-align: center; font-size: 1.8rem; }}
    h1 div {{ direction: rtl; font-size: 1.4rem; }}
    form {{ background: #f3f4f6; padding: 1rem; border-radius: .4rem; }}
    .field {{ display: block; font-weight: 600; margin-bottom: .5rem; }}
    .field input {{ display: block; width: 100%; padding: .5rem; border: 1px solid; border-radius: .4rem; }}
    .border-red-500 {{ border-color: #ef4444; }}
    .border-gray-300 {{ border-color: #d1d5db; }}
    .error {{ color: #ef4444; font-size: .85rem; font-weight: 400; }}
    button {{ width: 100%; padding: .5rem; background: #3b82f6; color: #fff; border: 0; border-radius: .4rem; }}
    button:disabled {{ opacity: .5; cursor: not-allowed; }}
    #clock {{ text-align: center; }}
    .output {{ margin-top: 1rem; padding: 1rem; direction: rtl; white-space: pre-line; }}
    footer {{ text-align: center; background: #1f2937; color: #fff; padding: 1.5rem; }}
    footer a {{ color: #fff; margin: 0 1.5rem; }}
  </style>
</head>
<body>
<main>
  <h1>{html.escape(messages.TITLE.primary)}
    <div>{html.escape(messages.TITLE.secondary)}</div>
  </h1>
  <form id="poem-form" action="/poem" method="get">
{word_field}
{count_field}
    <button type="submit" id="submit" data-busy="{html.escape(messages.BUSY_LABEL)}"{disabled}>{html.escape(controller.submit_label)}</button>
  </form>
  <p id="clock">{html.escape(clock_text)}</p>
  {output}
</main>
<footer>
  <nav class="contacts">
{contacts}
  </nav>
  <p>&copy; {datetime.now().year}</p>
</footer>
<script>{_PAGE_SCRIPT}</script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def home(
    client: PoemClient = Depends(get_poem_client),
    clock: Clock = Depends(get_clock),
):
    controller = SubmissionController(client)
    return HTMLResponse(render_page(controller, clock.read()))


@app.get("/poem", response_class=HTMLResponse)
async def poem_page(
    word: str = Query("", description="Arabic seed word"),
    count: str = Query("", description="Poem length"),
    client: PoemClient = Depends(get_poem_client),
    clock: Clock = Depends(get_clock),
):
    controller = SubmissionController(client)
    controller.set_word(word)
    controller.set_count(count)
    state = await controller.submit()
    logger.info("Form submission finished: %s", state.value)
    return HTMLResponse(render_page(controller, clock.read()))


@app.get("/generate", response_model=PoemResponse)
async def generate(
    seed: str = Query(..., description="Arabic seed word"),
    length: str = Query("", description="Poem length, defaults to 1000"),
    client: PoemClient = Depends(get_poem_client),
):
    outcome = validate(seed, length)
    if not outcome:
        return JSONResponse(
            status_code=422,
            content={"errors": {k: v.model_dump(mode="json") for k, v in outcome.errors.items()}},
        )

    value = outcome.value
    try:
        poem = await client.generate(value.word, value.count)
    except GenerationError as exc:
        logger.error("Generation failed for %s: %s", value.word, exc)
        raise HTTPException(
            status_code=502,
            detail=f"Poem generation failed for {value.word}: {exc}",
        ) from exc

    return PoemResponse(seed=value.word, length=value.count, poem=poem)


@app.post("/validate", response_model=ValidationReport)
async def validate_form(body: ValidationRequest):
    count = normalize_digits(body.count).strip() or str(DEFAULT_POEM_LENGTH)
    outcome = validate(body.word, count)
    return ValidationReport(
        valid=outcome.is_valid,
        errors=outcome.errors,
        word=body.word,
        count=count,
    )


@app.get("/clock")
async def clock_stream(request: Request, clock: Clock = Depends(get_clock)):
    async def events():
        queue: asyncio.Queue[str] = asyncio.Queue()
        async with clock.subscribe(queue.put_nowait):
            while not await request.is_disconnected():
                yield f"data: {await queue.get()}\n\n"

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION, "endpoint": POEM_API_URL}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "7860")))
