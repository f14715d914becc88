from resumegate.app.core.utils import request_fingerprint, serialize_profile


def test_serialize_profile_passes_strings_through():
    assert serialize_profile("plain resume") == "plain resume"


def test_serialize_profile_is_key_order_independent():
    assert serialize_profile({"b": 1, "a": [1, 2]}) == serialize_profile({"a": [1, 2], "b": 1})
    assert serialize_profile({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_serialize_profile_keeps_unicode():
    assert serialize_profile({"name": "Zoë"}) == '{"name":"Zoë"}'


def test_fingerprint_is_deterministic():
    assert request_fingerprint("job_match", "r", "j") == request_fingerprint("job_match", "r", "j")


def test_fingerprint_is_order_sensitive():
    assert request_fingerprint("job_match", "a", "b") != request_fingerprint("job_match", "b", "a")


def test_fingerprint_boundary_shift_differs():
    assert request_fingerprint("job_match", "ab", "c") != request_fingerprint("job_match", "a", "bc")


def test_fingerprint_namespaced_by_kind():
    key = request_fingerprint("resume_optimize", "r", "j")
    assert key.startswith("resume_optimize:")
    assert key != request_fingerprint("job_match", "r", "j")
