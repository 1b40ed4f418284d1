"""
Tests for the fault taxonomy.
"""

import pytest

from warmap.faults import (
    ArchiveFault,
    ClassDecodeFault,
    ClasspathConsistencyFault,
    ConfigFault,
    Fault,
    FaultDomain,
    InvalidContextFault,
    Severity,
)


class TestFault:

    def test_requires_code_message_domain(self):
        with pytest.raises(TypeError):
            Fault(code="X", message="no domain")

    def test_str_and_dict(self):
        fault = Fault(code="X_FAILED", message="it failed", domain=FaultDomain.DECODE)
        assert str(fault) == "[X_FAILED] it failed"
        assert fault.to_dict() == {
            "code": "X_FAILED",
            "message": "it failed",
            "domain": "decode",
            "severity": "error",
            "retryable": False,
            "metadata": {},
        }

    def test_domain_equality(self):
        assert FaultDomain.ARCHIVE == FaultDomain("archive")
        assert FaultDomain.ARCHIVE == "archive"
        assert FaultDomain.ARCHIVE != FaultDomain.CONTEXT


class TestDomainFaults:

    def test_archive(self):
        fault = ArchiveFault("ARCHIVE_NOT_FOUND", "No such file: x.war", path="x.war")
        assert fault.domain == FaultDomain.ARCHIVE
        assert fault.severity is Severity.ERROR
        assert fault.metadata["path"] == "x.war"

    def test_classpath_consistency_is_fatal(self):
        fault = ClasspathConsistencyFault("com/example/A.class", "WEB-INF/lib/a.jar")
        assert fault.code == "CLASSPATH_INCONSISTENT"
        assert fault.severity is Severity.FATAL
        assert "WEB-INF/lib/a.jar" in fault.message

    def test_classpath_consistency_classes_dir(self):
        fault = ClasspathConsistencyFault("com/example/A.class", "")
        assert "/WEB-INF/classes" in fault.message

    def test_invalid_context(self):
        fault = InvalidContextFault("Invalid context location: x", location="x", code="CONTEXT_NOT_FOUND")
        assert fault.domain == FaultDomain.CONTEXT
        assert fault.location == "x"
        assert fault.to_dict()["metadata"] == {"location": "x"}

    def test_class_decode(self):
        fault = ClassDecodeFault("com.example.A", "bad magic")
        assert fault.code == "CLASS_DECODE_FAILED"
        assert fault.class_name == "com.example.A"

    def test_config_is_fatal(self):
        fault = ConfigFault("display.x", "unknown key")
        assert fault.severity is Severity.FATAL
        assert isinstance(fault, Fault)
