"""
Exam Types

Data definitions for exams: how an exam is triggered and submitted,
what it sets up, and how it is graded.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from fakeshell.filesystem import VirtualFileSystem


TriggerMatcher = Callable[[str, List[str], set[str]], bool]


@dataclass
class TriggerCondition:
    """
    Command line that starts an exam.

    ``args_count`` counts the arguments after ``sub_command``. A
    ``matcher`` replaces all other checks.
    """
    command: str
    sub_command: Optional[str] = None
    args_count: Optional[int] = None
    matcher: Optional[TriggerMatcher] = None


@dataclass
class SubmitValidation:
    """Checks on the arguments of the submit command."""
    args_count: Optional[int] = None
    or_args: List[str] = field(default_factory=list)
    and_args: List[str] = field(default_factory=list)


@dataclass
class SubmitCondition:
    """Command line that ends and grades an exam."""
    command: str
    sub_command: Optional[str] = None
    validation: Optional[SubmitValidation] = None


@dataclass
class FileCheckRule:
    path: str
    should_exist: bool = True
    content_should_contain: List[str] = field(default_factory=list)
    content_should_not_contain: List[str] = field(default_factory=list)


@dataclass
class CommandHistoryRule:
    """Substring checks over the commands entered during the exam."""
    required_commands: List[str] = field(default_factory=list)
    forbidden_commands: List[str] = field(default_factory=list)
    order: List[str] = field(default_factory=list)


@dataclass
class GradingRules:
    command_history: Optional[CommandHistoryRule] = None
    file_checks: List[FileCheckRule] = field(default_factory=list)


@dataclass
class InitialFileSetup:
    path: str
    content: str = ''
    executable: bool = False


@dataclass
class InitialSetup:
    """Filesystem and environment prepared when an exam starts."""
    directories: List[str] = field(default_factory=list)
    files: List[InitialFileSetup] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    initial_path: Optional[str] = None


@dataclass
class ExamMessages:
    triggered: Optional[str] = None
    success: Optional[str] = None
    failure: Optional[str] = None


@dataclass
class ExamConfig:
    """A complete exam definition."""
    id: str
    title: str
    description: str
    trigger: TriggerCondition
    submit: SubmitCondition
    initial_setup: InitialSetup = field(default_factory=InitialSetup)
    grading_rules: GradingRules = field(default_factory=GradingRules)
    messages: ExamMessages = field(default_factory=ExamMessages)
    show_details: bool = False


@dataclass
class ExamResult:
    """
    Outcome of grading.

    ``details`` holds the ``command_check`` and ``file_check`` verdicts.
    """
    passed: bool
    details: dict[str, bool]
    failures: List[str] = field(default_factory=list)


@dataclass
class GradingContext:
    command_history: List[str]
    submit_args: List[str]
    submit_flags: set[str]
    vfs: 'VirtualFileSystem'
    cwd: str


@dataclass
class ExamStatus:
    in_exam: bool
    exam: Optional[ExamConfig]
    history_count: int
