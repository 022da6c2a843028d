"""Tests for quality_index.model.findings."""

from quality_index.model import Diagnostic, Finding


class TestDiagnostic:
    """Absent vs ran diagnostics and finding storage."""

    def test_new_diagnostic_is_absent(self):
        """A diagnostic no tool has reported on counts zero and has not run."""
        d = Diagnostic("err")
        assert not d.has_run
        assert d.count == 0
        assert d.findings == ()

    def test_empty_result_has_run(self):
        """Zero findings from a tool is different from no result at all."""
        d = Diagnostic("err", findings=[])
        assert d.has_run
        assert d.count == 0

    def test_add_finding_marks_as_run(self):
        d = Diagnostic("err")
        d.add_finding(Finding("e1", severity=2.0, location="a.py:3"))
        assert d.has_run
        assert d.count == 1
        assert d.findings[0].location == "a.py:3"

    def test_set_findings_replaces(self):
        """Setting findings twice keeps only the latest set."""
        d = Diagnostic("err", findings=[Finding("a"), Finding("b")])
        d.set_findings([Finding("c")])
        assert [f.identifier for f in d.findings] == ["c"]

    def test_reset_returns_to_absent(self):
        d = Diagnostic("err", findings=[Finding("a")])
        d.reset()
        assert not d.has_run
        assert d.count == 0

    def test_empty_copy_keeps_identity_not_findings(self):
        d = Diagnostic("err", "Error patterns", tool="linter", findings=[Finding("a")])
        copy = d.empty_copy()
        assert (copy.name, copy.description, copy.tool) == ("err", "Error patterns", "linter")
        assert not copy.has_run
        assert d.count == 1

    def test_findings_view_is_immutable(self):
        """The findings property returns a snapshot tuple."""
        d = Diagnostic("err", findings=[Finding("a")])
        snapshot = d.findings
        d.add_finding(Finding("b"))
        assert len(snapshot) == 1
        assert d.count == 2


class TestFinding:
    def test_defaults(self):
        f = Finding("x")
        assert f.severity == 1.0
        assert f.location == ""
