"""Test cases for EscalationPolicy - fatal vs informational warnings."""

import logging

import pytest

from monobuild.build.escalation import EscalationPolicy
from monobuild.core.enums import WarningCode, WarningDisposition
from monobuild.core.exceptions import FatalWarningError
from monobuild.core.models import BuildTarget, ClassifiedWarning, UnclassifiedWarning


@pytest.fixture
def policy(tmp_path):
    target = BuildTarget(name='Outline', input_path=tmp_path / 'a.js', output_path=tmp_path / 'b.js')
    return EscalationPolicy(target)


class TestClassify:

    def test_circular_dependency_is_suppressed(self):
        warning = ClassifiedWarning(code=WarningCode.CIRCULAR_DEPENDENCY.value, message='cycle')
        assert EscalationPolicy.classify(warning) is WarningDisposition.SUPPRESSED

    @pytest.mark.parametrize('code', [
        WarningCode.MISSING_EXPORT.value,
        WarningCode.NAMESPACE_CONFLICT.value,
        WarningCode.UNRESOLVED_IMPORT.value,
        'SOME_FUTURE_CODE',
    ])
    def test_other_codes_are_fatal(self, code):
        assert EscalationPolicy.classify(ClassifiedWarning(code=code, message='x')) is WarningDisposition.FATAL

    def test_stage_warning_is_informational(self):
        warning = UnclassifiedWarning(message='plugin said something')
        assert EscalationPolicy.classify(warning) is WarningDisposition.INFORMATIONAL

    def test_unknown_warning_type_is_rejected(self):
        with pytest.raises(TypeError):
            EscalationPolicy.classify('just a string')


class TestHandle:

    def test_fatal_warning_prints_to_stderr_and_raises(self, policy, capsys):
        warning = ClassifiedWarning(code='NAMESPACE_CONFLICT', message='Conflicting namespaces')

        with pytest.raises(FatalWarningError) as exc_info:
            policy.handle(warning)

        assert exc_info.value.warning is warning
        assert exc_info.value.target_name == 'Outline'
        captured = capsys.readouterr()
        assert 'Conflicting namespaces' in captured.err
        assert captured.out == ''

    def test_suppressed_warning_is_silent(self, policy, capsys, caplog):
        with caplog.at_level(logging.DEBUG):
            policy.handle(ClassifiedWarning(code='CIRCULAR_DEPENDENCY', message='a -> b -> a'))

        captured = capsys.readouterr()
        assert captured.out == '' and captured.err == ''
        assert 'a -> b -> a' not in caplog.text

    def test_informational_warning_is_logged_with_target(self, policy, caplog):
        with caplog.at_level(logging.WARNING):
            policy.handle(UnclassifiedWarning(message='babel: unknown option'))

        assert '[Outline] babel: unknown option' in caplog.text

    def test_suppression_does_not_carry_over(self, policy):
        policy.handle(ClassifiedWarning(code='CIRCULAR_DEPENDENCY', message='cycle'))

        with pytest.raises(FatalWarningError):
            policy.handle(ClassifiedWarning(code='MISSING_EXPORT', message='missing'))

    def test_many_suppressed_warnings_never_abort(self, policy):
        for i in range(50):
            policy(ClassifiedWarning(code='CIRCULAR_DEPENDENCY', message=f'cycle {i}'))
            policy(UnclassifiedWarning(message=f'note {i}'))
