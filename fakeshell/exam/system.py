"""
Exam System

Runs command-line exams on top of a shell session. The exam system
only uses the session's public hooks: it observes command lines
before they run, registers its own commands, sets environment
variables and inspects the virtual file system.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Callable, Iterable, List, Optional, TYPE_CHECKING

from .types import (
    CommandHistoryRule,
    ExamConfig,
    ExamResult,
    ExamStatus,
    FileCheckRule,
    GradingContext,
    SubmitValidation,
    TriggerCondition,
)
from fakeshell.filesystem.node import DEFAULT_FILE_PERMISSIONS
from fakeshell.logger import get_logger
from fakeshell.shell.parser import CommandParser
from fakeshell.shell.registry import CommandDefinition, ExecutionContext

if TYPE_CHECKING:
    from fakeshell.shell.shell import Shell


EXECUTABLE_PERMISSIONS = '-rwxr-xr-x'
BOX_WIDTH = 56


class ExamSystem:
    """
    Exam overlay for a shell session.

    Example:
        >>> exams = ExamSystem(example_exams, on_graded=report)
        >>> exams.attach(shell)
        >>> for command in exams.get_exam_commands():
        ...     shell.register_command(command)
    """

    def __init__(
        self,
        exams: Iterable[ExamConfig],
        on_graded: Optional[Callable[[ExamResult, ExamConfig], object]] = None,
        on_exam_started: Optional[Callable[[ExamConfig], object]] = None
    ):
        self._exams: dict[str, ExamConfig] = {exam.id: exam for exam in exams}
        self._on_graded = on_graded
        self._on_exam_started = on_exam_started
        self._active: Optional[ExamConfig] = None
        self._history: List[str] = []
        self._shell: Optional['Shell'] = None
        self._parser = CommandParser()
        self._logger = get_logger('exam')

    @property
    def exams(self) -> List[ExamConfig]:
        return list(self._exams.values())

    @property
    def active_exam(self) -> Optional[ExamConfig]:
        return self._active

    @property
    def in_exam(self) -> bool:
        return self._active is not None

    def attach(self, shell: 'Shell') -> None:
        """Bind to a shell and start observing its command lines."""
        self._shell = shell
        shell.set_on_command(self.on_command)

    def get_exam_commands(self) -> List[CommandDefinition]:
        """Commands to start, submit and inspect exams by hand."""
        return [
            CommandDefinition(
                name='exam-start',
                execute=self._cmd_start,
                description='Manually start an exam by ID',
                usage='exam-start <exam-id>',
                complete=lambda partial, ctx: sorted(
                    i for i in self._exams if i.startswith(partial)
                )
            ),
            CommandDefinition(
                name='exam-submit',
                execute=self._cmd_submit,
                description='Submit the current exam',
                usage='exam-submit'
            ),
            CommandDefinition(
                name='exam-status',
                execute=self._cmd_status,
                description='Show exam status',
                usage='exam-status'
            ),
        ]

    def on_command(self, line: str) -> None:
        """
        Observe a command line before it runs.

        Outside an exam the first exam whose trigger matches is started.
        During an exam a matching submit line grades it, and any other
        line is recorded.
        """
        if self._shell is None:
            return

        parsed = self._parser.parse(line)
        stripped = line.strip()

        if self._active is None:
            exam = self._find_matching_exam(parsed.command, parsed.args, parsed.flags, stripped)
            if exam is not None:
                self.start_exam(exam)
                self._history.append(stripped)
            return

        if self._is_submit(parsed.command, parsed.args):
            self.submit_exam(parsed.args, parsed.flags)
            return

        self._history.append(stripped)

    def start_exam(self, exam: ExamConfig) -> bool:
        """Start an exam; fails if one is already running."""
        if self._active is not None:
            self._warn('An exam is already in progress')
            return False

        self._active = exam
        self._history = []

        self._setup_environment(exam)
        self._show_exam_info(exam)

        self._logger.info(f"Exam started: {exam.id}")

        if self._on_exam_started is not None:
            self._on_exam_started(exam)
        return True

    def submit_exam(self, args: List[str], flags: set[str]) -> Optional[ExamResult]:
        """Grade and end the running exam."""
        exam = self._active
        if exam is None:
            self._error('No exam in progress')
            return None

        self._println('')
        self._println('Grading...')
        self._println('')

        result = self.grade(args, flags)
        self._show_result(result, exam)

        self._logger.info(
            f"Exam graded: {exam.id}",
            context={'passed': result.passed, 'failures': len(result.failures)}
        )

        if self._on_graded is not None:
            self._on_graded(result, exam)

        self.end_exam()
        return result

    def end_exam(self) -> None:
        """Abandon the running exam without grading."""
        self._active = None
        self._history = []

    def get_status(self) -> ExamStatus:
        return ExamStatus(
            in_exam=self._active is not None,
            exam=self._active,
            history_count=len(self._history)
        )

    # Matching

    def _find_matching_exam(
        self,
        command: str,
        args: List[str],
        flags: set[str],
        line: str
    ) -> Optional[ExamConfig]:
        for exam in self._exams.values():
            if self._matches_trigger(exam.trigger, command, args, flags, line):
                return exam
        return None

    @staticmethod
    def _matches_trigger(
        trigger: TriggerCondition,
        command: str,
        args: List[str],
        flags: set[str],
        line: str
    ) -> bool:
        if trigger.matcher is not None:
            return trigger.matcher(line, args, flags)

        if command != trigger.command:
            return False

        if trigger.sub_command is not None:
            if not args or args[0] != trigger.sub_command:
                return False

        if trigger.args_count is not None:
            effective = args[1:] if trigger.sub_command is not None else args
            if len(effective) != trigger.args_count:
                return False

        return True

    def _is_submit(self, command: str, args: List[str]) -> bool:
        submit = self._active.submit
        if command != submit.command:
            return False
        if submit.sub_command is not None:
            return bool(args) and args[0] == submit.sub_command
        return True

    # Grading

    def grade(self, args: List[str], flags: set[str]) -> ExamResult:
        """Grade the running exam against its rules."""
        exam = self._active
        vfs = self._shell.vfs
        context = GradingContext(
            command_history=list(self._history),
            submit_args=list(args),
            submit_flags=set(flags),
            vfs=vfs,
            cwd=vfs.cwd
        )

        failures: List[str] = []

        command_check = True
        rule = exam.grading_rules.command_history
        if rule is not None:
            history_failures = self._check_command_history(context, rule)
            if history_failures:
                command_check = False
                failures.extend(history_failures)

        file_check = True
        for check in exam.grading_rules.file_checks:
            failure = self._check_file(context, check)
            if failure is not None:
                file_check = False
                failures.append(failure)

        if exam.submit.validation is not None:
            failure = self._check_submit(args, flags, exam.submit.validation)
            if failure is not None:
                failures.append(failure)

        return ExamResult(
            passed=command_check and file_check and not failures,
            details={'command_check': command_check, 'file_check': file_check},
            failures=failures
        )

    @staticmethod
    def _check_command_history(context: GradingContext, rule: CommandHistoryRule) -> List[str]:
        failures = []
        history = context.command_history

        for required in rule.required_commands:
            if not any(required in cmd for cmd in history):
                failures.append(f"Required command not run: {required}")

        for forbidden in rule.forbidden_commands:
            if any(forbidden in cmd for cmd in history):
                failures.append(f"Forbidden command run: {forbidden}")

        if len(rule.order) > 1:
            last_index = -1
            for expected in rule.order:
                index = next(
                    (i for i, cmd in enumerate(history) if expected in cmd),
                    -1
                )
                if index == -1:
                    failures.append(f"Command not run in order: {expected}")
                elif index <= last_index:
                    failures.append(f"Command out of order: {expected}")
                last_index = index

        return failures

    @staticmethod
    def _check_file(context: GradingContext, rule: FileCheckRule) -> Optional[str]:
        vfs = context.vfs
        exists = vfs.exists(rule.path)

        if rule.should_exist and not exists:
            return f"File does not exist: {rule.path}"
        if not rule.should_exist and exists:
            return f"File should not exist: {rule.path}"

        if exists:
            content = vfs.read_file(rule.path) or ''
            for text in rule.content_should_contain:
                if text not in content:
                    return f"File {rule.path} does not contain: {text}"
            for text in rule.content_should_not_contain:
                if text in content:
                    return f"File {rule.path} should not contain: {text}"

        return None

    @staticmethod
    def _has_arg(expected: str, args: List[str], flags: set[str]) -> bool:
        """Match a positional argument, or a flag given as -x or --name."""
        if expected in args:
            return True
        if expected.startswith('--'):
            return expected[2:] in flags
        if expected.startswith('-') and len(expected) == 2:
            return expected[1] in flags
        return False

    def _check_submit(
        self,
        args: List[str],
        flags: set[str],
        validation: SubmitValidation
    ) -> Optional[str]:
        if validation.args_count is not None and len(args) != validation.args_count:
            return (
                f"Wrong number of arguments: expected {validation.args_count}, "
                f"got {len(args)}"
            )

        if validation.or_args and not any(
            self._has_arg(a, args, flags) for a in validation.or_args
        ):
            return f"Expected one of these arguments: {', '.join(validation.or_args)}"

        for expected in validation.and_args:
            if not self._has_arg(expected, args, flags):
                return f"Missing required argument: {expected}"

        return None

    # Setup and display

    def _setup_environment(self, exam: ExamConfig) -> None:
        shell = self._shell
        vfs = shell.vfs
        setup = exam.initial_setup

        for directory in setup.directories:
            if not vfs.mkdir(directory) and not vfs.is_directory(directory):
                self._logger.warning(
                    f"Exam setup could not create {directory}",
                    context={'exam': exam.id}
                )

        for file in setup.files:
            if not vfs.write_file(file.path, file.content):
                self._logger.warning(
                    f"Exam setup could not write {file.path}",
                    context={'exam': exam.id}
                )
                continue
            node = vfs.get_node(file.path)
            node.permissions = EXECUTABLE_PERMISSIONS if file.executable else DEFAULT_FILE_PERMISSIONS

        for key, value in setup.env.items():
            shell.set_env(key, value)

        if setup.initial_path:
            vfs.chdir(setup.initial_path)

    @staticmethod
    def _truncate(text: str, width: int) -> str:
        if len(text) <= width:
            return text
        return text[:width - 3] + '...'

    def _box_line(self, text: str) -> str:
        return '║  ' + self._truncate(text, BOX_WIDTH - 2).ljust(BOX_WIDTH - 2) + '║'

    def _show_exam_info(self, exam: ExamConfig) -> None:
        rule = '═' * BOX_WIDTH
        submit = f"{exam.submit.command} {exam.submit.sub_command or ''}".rstrip()

        self._println('')
        self._println(f'╔{rule}╗')
        self._println(self._box_line(exam.title))
        self._println(f'╠{rule}╣')
        self._println(self._box_line(f"Task: {exam.description}"))
        self._println(f'╠{rule}╣')
        if exam.messages.triggered:
            self._println(self._box_line(exam.messages.triggered))
        self._println(self._box_line(f"When done, run: {submit}"))
        self._println(f'╚{rule}╝')
        self._println('')

    def _show_result(self, result: ExamResult, exam: ExamConfig) -> None:
        rule = '═' * BOX_WIDTH

        self._println(f'╔{rule}╗')
        self._println('║' + ('Exam passed!' if result.passed else 'Exam failed').center(BOX_WIDTH) + '║')
        self._println(f'╚{rule}╝')
        self._println('')

        if result.passed:
            self._success(exam.messages.success or 'Congratulations, you passed the exam!')
            if exam.show_details:
                self._println('')
                self._println('Details:')
                self._println('  ✓ Command history check')
                self._println('  ✓ File state check')
        else:
            self._error(exam.messages.failure or 'Exam failed')
            self._println('')
            self._println('Reasons:')
            for failure in result.failures:
                self._println(f"  • {failure}")

        self._println('')

    def _println(self, text: str = '') -> None:
        if self._shell is not None:
            self._shell.output.println(text)

    def _error(self, text: str) -> None:
        if self._shell is not None:
            self._shell.output.error(text)

    def _warn(self, text: str) -> None:
        if self._shell is not None:
            self._shell.output.warn(text)

    def _success(self, text: str) -> None:
        if self._shell is not None:
            self._shell.output.success(text)

    # Commands

    def _cmd_start(self, ctx: ExecutionContext) -> int:
        if not ctx.args:
            ctx.output.error('Usage: exam-start <exam-id>')
            ctx.output.println('Available exams:')
            for exam_id, exam in self._exams.items():
                ctx.output.println(f"  {exam_id}: {exam.title}")
            return 1

        exam = self._exams.get(ctx.args[0])
        if exam is None:
            ctx.output.error(f"Exam not found: {ctx.args[0]}")
            return 1

        return 0 if self.start_exam(exam) else 1

    def _cmd_submit(self, ctx: ExecutionContext) -> int:
        return 0 if self.submit_exam(ctx.args, ctx.flags) is not None else 1

    def _cmd_status(self, ctx: ExecutionContext) -> int:
        status = self.get_status()
        if status.in_exam:
            ctx.output.println(f"Current exam: {status.exam.title}")
            ctx.output.println(f"Commands executed: {status.history_count}")
        else:
            ctx.output.println('No exam in progress')
        return 0
