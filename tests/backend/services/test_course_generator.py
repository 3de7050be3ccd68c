import json

import httpx

from backend.services.course_generator import CourseDetails, CourseDetailsGenerator, parse_generated_details


def _gemini_body(text: str) -> dict:
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


def _generator(handler, api_key: str = 'test-key') -> CourseDetailsGenerator:
    client = httpx.Client(transport=httpx.MockTransport(handler), base_url='https://gemini.test')
    return CourseDetailsGenerator(api_key=api_key, model='gemini-test', client=client)


def test_generate_returns_parsed_details() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['path'] = request.url.path
        captured['key'] = request.headers.get('x-goog-api-key')
        captured['payload'] = json.loads(request.content)
        payload = json.dumps({'description': 'Throw a bowl.', 'prerequisites': 'Apron, towel, curiosity'})
        return httpx.Response(200, json=_gemini_body(payload))

    details = _generator(handler).generate('Intro to Pottery')

    assert details == CourseDetails(description='Throw a bowl.', prerequisites='Apron, towel, curiosity')
    assert captured['path'] == '/v1beta/models/gemini-test:generateContent'
    assert captured['key'] == 'test-key'
    assert 'Intro to Pottery' in captured['payload']['contents'][0]['parts'][0]['text']
    assert captured['payload']['generationConfig'] == {'responseMimeType': 'application/json'}


def test_generate_without_api_key_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError('no request expected')

    assert _generator(handler, api_key='').generate('Intro to Pottery') is None


def test_generate_returns_none_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={'error': 'overloaded'})

    assert _generator(handler).generate('Intro to Pottery') is None


def test_generate_returns_none_on_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout('timed out', request=request)

    assert _generator(handler).generate('Intro to Pottery') is None


def test_generate_returns_none_on_malformed_output() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_body('Sure! Here is a description...'))

    assert _generator(handler).generate('Intro to Pottery') is None


def test_generate_returns_none_for_blank_title() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError('no request expected')

    assert _generator(handler).generate('   ') is None


def test_parse_generated_details_accepts_fenced_json_and_lists() -> None:
    text = '```json\n{"description": " Weave a wall hanging. ", "prerequisites": ["Scissors", "Yarn"]}\n```'

    details = parse_generated_details(text)

    assert details.description == 'Weave a wall hanging.'
    assert details.prerequisites == 'Scissors, Yarn'


def test_as_description_appends_prerequisites() -> None:
    details = CourseDetails(description='Carve a spoon.', prerequisites='Gloves')

    assert details.as_description() == 'Carve a spoon.\n\nPrerequisites: Gloves'
    assert CourseDetails(description='Carve a spoon.', prerequisites='').as_description() == 'Carve a spoon.'
