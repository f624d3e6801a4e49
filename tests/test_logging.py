from structlog.testing import capture_logs

from octoform.logging import bind_context


def test_bind_context_skips_none():
    with capture_logs() as logs:
        bind_context(resource_type="widget", resource_id=None).info("resource_created")

    assert logs == [{"event": "resource_created", "log_level": "info", "resource_type": "widget"}]
