# barberbook/flows/llm.py
"""
Shared plumbing for the AI flows.

A flow is a named prompt with a pydantic input and output model. The model
is asked for a JSON object matching the output schema; anything that does not
parse or validate is a FlowError.
"""

import json
import logging
from functools import lru_cache
from typing import Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from barberbook.config import settings
from barberbook.exceptions import FlowError, NotConfiguredError

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)


@lru_cache
def get_client() -> OpenAI:
    if not settings.OPENAI_API_KEY:
        raise NotConfiguredError("OpenAI API key")
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def _schema_hint(output_model: Type[BaseModel]) -> str:
    fields = ", ".join(f'"{name}"' for name in output_model.model_fields)
    return f"Responda somente com um objeto JSON com as chaves: {fields}."


def run_flow(name: str, prompt: str, output_model: Type[OutputT]) -> OutputT:
    """Send one prompt and validate the JSON reply against output_model."""
    logger.info(f"Running flow {name} with model={settings.OPENAI_MODEL}")
    client = get_client()

    try:
        response = client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": _schema_hint(output_model)},
                {"role": "user", "content": prompt},
            ],
        )
        response_text = response.choices[0].message.content or ""
    except Exception as e:
        logger.error(f"Flow {name}: OpenAI call failed: {e}")
        raise FlowError(name, f"OpenAI API call failed: {e}")

    logger.debug(f"Flow {name} response: {response_text[:200]}")

    try:
        data = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise FlowError(name, f"Invalid JSON response from model: {e}")

    try:
        return output_model.model_validate(data)
    except ValidationError as e:
        errors = [f"{err['loc']}: {err['msg']}" for err in e.errors()]
        raise FlowError(name, f"Invalid flow output: {'; '.join(errors)}")
