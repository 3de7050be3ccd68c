"""Drafts workshop descriptions with the Gemini text-generation API.

The generator is a convenience for the course form: any failure yields
``None`` and the instructor writes the description by hand.
"""

import json
import logging
from dataclasses import dataclass

import httpx

from backend.core import config
from backend.core.errors import CollaboratorUnavailable

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are an expert curriculum designer for handmade crafts and DIY workshops.
Create a compelling, warm, and inviting course description (approx 80-100 words) for a workshop titled "{title}".
Also list 3 short prerequisites or things to bring.

Return the response in strictly valid JSON format with keys: "description" (string) and "prerequisites" (string).
Do not include markdown code blocks.
"""


@dataclass(frozen=True)
class CourseDetails:
    description: str
    prerequisites: str

    def as_description(self) -> str:
        if not self.prerequisites:
            return self.description
        return f'{self.description}\n\nPrerequisites: {self.prerequisites}'


class CourseDetailsGenerator:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self._model = model or config.GEMINI_MODEL
        if client is None:
            self._client = httpx.Client(
                base_url=base_url or config.GEMINI_BASE_URL,
                timeout=timeout or config.GEMINI_TIMEOUT_SECONDS,
            )
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def generate(self, title: str) -> CourseDetails | None:
        """Return drafted details for ``title``, or ``None`` if none could be made."""
        title = (title or '').strip()
        if not title:
            return None

        try:
            return self._request_details(title)
        except CollaboratorUnavailable as exc:
            logger.warning('Course details generation unavailable: %s', exc)
            return None

    def _request_details(self, title: str) -> CourseDetails:
        if not self.configured:
            raise CollaboratorUnavailable('Gemini API key not configured.')

        payload = {
            'contents': [{'parts': [{'text': PROMPT_TEMPLATE.format(title=title)}]}],
            'generationConfig': {'responseMimeType': 'application/json'},
        }
        try:
            response = self._client.post(
                f'/v1beta/models/{self._model}:generateContent',
                json=payload,
                headers={'x-goog-api-key': self._api_key},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorUnavailable(str(exc) or exc.__class__.__name__) from exc

        return parse_generated_details(extract_text(body))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def extract_text(body: dict) -> str:
    try:
        parts = body['candidates'][0]['content']['parts']
    except (KeyError, IndexError, TypeError) as exc:
        raise CollaboratorUnavailable('Gemini response had no candidates.') from exc

    text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict))
    if not text.strip():
        raise CollaboratorUnavailable('Gemini response was empty.')
    return text


def parse_generated_details(text: str) -> CourseDetails:
    cleaned = text.strip()
    if cleaned.startswith('```'):
        cleaned = cleaned.strip('`')
        if cleaned.lower().startswith('json'):
            cleaned = cleaned[4:]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise CollaboratorUnavailable('Gemini returned malformed JSON.') from exc

    if not isinstance(data, dict) or not isinstance(data.get('description'), str):
        raise CollaboratorUnavailable('Gemini response is missing a description.')

    prerequisites = data.get('prerequisites') or ''
    if isinstance(prerequisites, list):
        prerequisites = ', '.join(str(item) for item in prerequisites)

    return CourseDetails(
        description=data['description'].strip(),
        prerequisites=str(prerequisites).strip(),
    )


def get_course_generator():
    generator = CourseDetailsGenerator()
    try:
        yield generator
    finally:
        generator.close()
