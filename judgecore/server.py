#! /usr/bin/env python3
"""
HTTP interface of the judge.

Endpoints are plain (non-async) functions, so FastAPI runs each request in
its own worker thread; one request blocks only its own thread while the
submission's processes run.
"""
import argparse
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from . import constraints
from . import languages
from . import pipeline
from .config import load_judge_config
from .constraints import Difficulty
from .logger import initialize_logging
from .models import ExecutionLimits, TestCase
from .run import limit
from .run.errors import InternalError, UnsupportedLanguage
from .version import add_version_arg, get_version

log = logging.getLogger(__name__)

API = '/api/v1'


class TestCaseModel(BaseModel):
    input: str = ''
    output: str = ''

    def to_testcase(self) -> TestCase:
        return TestCase(input=self.input, output=self.output)


class ExecuteRequest(BaseModel):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
    input: str = ''


class ExecuteTestsRequest(BaseModel):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
    test_cases: list[TestCaseModel] = Field(default_factory=list, alias='testCases')
    time_limit_ms: int | None = Field(None, gt=0, validation_alias=AliasChoices('timeLimitMs', 'timeLimit'))
    memory_limit_mb: int | None = Field(None, gt=0, validation_alias=AliasChoices('memoryLimitMb', 'memoryLimit'))

    model_config = ConfigDict(populate_by_name=True)


class ConstraintsRequest(BaseModel):
    constraints: str = ''
    difficulty: str = str(Difficulty.MEDIUM)


class SubmissionRequest(BaseModel):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
    sample_test_cases: list[TestCaseModel] = Field(default_factory=list, alias='sampleTestCases')
    hidden_test_cases: list[TestCaseModel] = Field(default_factory=list, alias='hiddenTestCases')
    time_limit_ms: int | None = Field(None, gt=0, validation_alias=AliasChoices('timeLimitMs', 'timeLimit'))
    memory_limit_mb: int | None = Field(None, gt=0, validation_alias=AliasChoices('memoryLimitMb', 'memoryLimit'))
    constraints: str | None = None
    difficulty: str = str(Difficulty.MEDIUM)
    submission_id: str | None = Field(None, alias='submissionId')

    model_config = ConfigDict(populate_by_name=True)


def _limits(time_limit_ms, memory_limit_mb, parsed=None) -> ExecutionLimits:
    """Limits of a request: explicit values first, then limits parsed from
    constraint text, then the configured defaults."""
    defaults = load_judge_config().default_limits
    if parsed is not None:
        base_time, base_memory = parsed.limits.time_limit_ms, parsed.limits.memory_limit_mb
    else:
        base_time, base_memory = defaults.time_limit_ms, defaults.memory_limit_mb
    return ExecutionLimits(time_limit_ms=time_limit_ms or base_time,
                           memory_limit_mb=memory_limit_mb or base_memory)


app = FastAPI(title='Judge Core', version=get_version())


@app.exception_handler(UnsupportedLanguage)
def unsupported_language(request: Request, exc: UnsupportedLanguage):
    return JSONResponse(status_code=400, content={'success': False, 'message': str(exc)})


@app.exception_handler(InternalError)
def internal_error(request: Request, exc: InternalError):
    log.error('Internal error handling %s: %s', request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={'success': False, 'message': 'Internal server error'})


@app.get('/health')
def health():
    return {'status': 'ok'}


@app.get(f'{API}/compiler/languages')
def supported_languages():
    return {
        'success': True,
        'message': 'Supported languages retrieved successfully',
        'data': [{'value': lang.lang_id, 'label': lang.name, 'extension': lang.extension}
                 for lang in languages.load_language_config()],
    }


@app.post(f'{API}/compiler/execute')
def execute(req: ExecuteRequest):
    return pipeline.execute(req.code, req.language, req.input)


@app.post(f'{API}/compiler/execute-tests')
def execute_tests(req: ExecuteTestsRequest):
    limits = _limits(req.time_limit_ms, req.memory_limit_mb)
    return pipeline.execute_tests(req.code, req.language,
                                  [tc.to_testcase() for tc in req.test_cases],
                                  limits.time_limit_ms, limits.memory_limit_mb)


@app.post(f'{API}/constraints/parse')
def parse_constraints(req: ConstraintsRequest):
    return {'success': True, 'data': constraints.parse(req.constraints, req.difficulty).to_dict()}


@app.post(f'{API}/submissions')
def submit(req: SubmissionRequest):
    parsed = None
    if req.constraints:
        parsed = constraints.parse(req.constraints, req.difficulty)
    limits = _limits(req.time_limit_ms, req.memory_limit_mb, parsed)
    record = pipeline.judge_submission(req.code, req.language,
                                       [tc.to_testcase() for tc in req.sample_test_cases],
                                       [tc.to_testcase() for tc in req.hidden_test_cases],
                                       limits,
                                       submission_id=req.submission_id,
                                       rules=parsed.rules if parsed is not None else None)
    return {'success': True, 'message': record.message, 'data': record.to_dict()}


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Serve the judge over HTTP.')
    parser.add_argument('--host', default='127.0.0.1', help='address to listen on')
    parser.add_argument('--port', type=int, default=8000, help='port to listen on')
    parser.add_argument('-l', '--log_level', default='info', help='set log level (debug, info, warning, error, critical)')
    add_version_arg(parser)
    return parser


def main() -> None:
    args = argparser().parse_args()
    initialize_logging(args.log_level, verbose=True)
    limit.check_limit_capabilities(log)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == '__main__':
    main()
