import pytest

from apipulse.core.exceptions import ConfigurationError
from apipulse.core.models import LoadTestConfig, LoadTestResult, RunOutcome, ChartData


def _config(**overrides):
    values = {
        "target_url": "https://api.example.com/health",
        "thread_count": 10,
        "duration_seconds": 30,
    }
    values.update(overrides)
    return LoadTestConfig(**values)


def test_defaults():
    config = _config()
    assert config.method == "GET"
    assert config.timeout_seconds == 15
    assert config.max_retries == 3
    assert config.content_type == "application/json"
    assert config.validate() == []


def test_method_is_normalized_to_upper_case():
    assert _config(method="post").method == "POST"


def test_host_property():
    assert _config(target_url="http://localhost:8080/items?x=1").host == "localhost"


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"target_url": "not a url"}, "Invalid URL"),
        ({"target_url": "ftp://example.com/file"}, "Invalid URL"),
        ({"thread_count": 0}, "Thread count must be between 1 and 1000"),
        ({"thread_count": 1001}, "Thread count must be between 1 and 1000"),
        ({"duration_seconds": 0}, "Duration must be between 1 and 3600"),
        ({"duration_seconds": 3601}, "Duration must be between 1 and 3600"),
        ({"timeout_seconds": 0}, "Timeout must be positive"),
        ({"max_retries": -1}, "Max retries cannot be negative"),
        ({"method": "TRACE"}, "Unsupported HTTP method"),
    ],
)
def test_validate_reports_each_violation(overrides, fragment):
    errors = _config(**overrides).validate()
    assert len(errors) == 1
    assert fragment in errors[0]


def test_boundaries_are_accepted():
    assert _config(thread_count=1, duration_seconds=1).validate() == []
    assert _config(thread_count=1000, duration_seconds=3600).validate() == []


def test_create_raises_with_every_message():
    with pytest.raises(ConfigurationError) as exc_info:
        LoadTestConfig.create(target_url="nope", thread_count=0, duration_seconds=9999)

    assert len(exc_info.value.errors) == 3
    assert isinstance(exc_info.value, ValueError)
    assert "Thread count" in str(exc_info.value)


def test_body_is_only_sent_for_methods_that_allow_it():
    assert _config(method="POST", request_body='{"a": 1}').sends_body
    assert _config(method="PATCH", request_body="x").sends_body
    assert not _config(method="GET", request_body='{"a": 1}').sends_body
    assert not _config(method="HEAD", request_body='{"a": 1}').sends_body
    assert not _config(method="POST", request_body="").sends_body


def test_query_parameters_are_copied():
    params = {"page": "1"}
    config = _config(query_parameters=params)
    params["page"] = "2"
    assert config.query_parameters == {"page": "1"}


def test_config_is_immutable():
    config = _config()
    with pytest.raises(AttributeError):
        config.thread_count = 5


def test_result_cancelled_flag(sample_stats):
    completed = LoadTestResult(statistics=sample_stats, chart_data=ChartData())
    cancelled = LoadTestResult(
        statistics=sample_stats, chart_data=ChartData(), outcome=RunOutcome.CANCELLED
    )
    assert not completed.cancelled
    assert cancelled.cancelled


def test_statistics_to_dict(sample_stats):
    data = sample_stats.to_dict()
    assert data["host"] == "api.example.com"
    assert data["p95_latency_ms"] == 310.75
    assert data["start_timestamp"] == "2026-03-01T12:00:00"
