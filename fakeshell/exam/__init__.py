"""
FakeShell Exam Module

Command-line exams graded from what a user does in a shell session:
- Trigger and submit conditions
- Initial filesystem and environment setup
- Grading by command history, file state and submit arguments
"""

from .types import (
    TriggerCondition,
    SubmitCondition,
    SubmitValidation,
    FileCheckRule,
    CommandHistoryRule,
    GradingRules,
    InitialFileSetup,
    InitialSetup,
    ExamMessages,
    ExamConfig,
    ExamResult,
    GradingContext,
    ExamStatus,
)
from .system import ExamSystem
from .examples import (
    DOCKER_EXAM,
    GIT_EXAM,
    FILE_OPS_EXAM,
    COMPILE_EXAM,
    EXAMPLE_EXAMS,
)

__all__ = [
    'TriggerCondition',
    'SubmitCondition',
    'SubmitValidation',
    'FileCheckRule',
    'CommandHistoryRule',
    'GradingRules',
    'InitialFileSetup',
    'InitialSetup',
    'ExamMessages',
    'ExamConfig',
    'ExamResult',
    'GradingContext',
    'ExamStatus',
    'ExamSystem',
    'DOCKER_EXAM',
    'GIT_EXAM',
    'FILE_OPS_EXAM',
    'COMPILE_EXAM',
    'EXAMPLE_EXAMS',
]
