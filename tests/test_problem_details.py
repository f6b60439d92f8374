from media_gate.security.errors import FileDeliveryError, PermissionCheckError
from media_gate.security.problem_details import gateway_error_response, problem_response


def test_problem_response_mirrors_correlation_id():
    response = problem_response(
        status=500,
        title="File unavailable",
        detail="File is unavailable",
        extras={"code": "file_unavailable"},
        correlation_id="cid-123",
        instance="/wp-content/uploads/a.png",
    )
    assert response.status_code == 500
    assert response.headers["X-Correlation-ID"] == "cid-123"
    assert b'"instance":"/wp-content/uploads/a.png"' in response.body
    assert b'"type":"about:blank"' in response.body


def test_problem_response_generates_correlation_id():
    response = problem_response(status=500, title="t", detail="d")
    assert response.headers["X-Correlation-ID"]


def test_gateway_error_response_uses_error_code():
    response = gateway_error_response(PermissionCheckError(), title="Access check unavailable")
    assert response.status_code == 500
    assert b'"code":"permission_check_failed"' in response.body

    response = gateway_error_response(FileDeliveryError("gone"), title="File unavailable")
    assert b'"detail":"gone"' in response.body
