"""
Example Exams

Ready-made exams showing the trigger, submit and grading options.
"""

from .types import (
    CommandHistoryRule,
    ExamConfig,
    ExamMessages,
    FileCheckRule,
    GradingRules,
    InitialFileSetup,
    InitialSetup,
    SubmitCondition,
    SubmitValidation,
    TriggerCondition,
)


# Triggered by `docker build`, submitted with `docker push IMAGE`
DOCKER_EXAM = ExamConfig(
    id='docker-basic',
    title='Docker Basics Exam',
    description='Build a Docker image and push it to the registry',
    trigger=TriggerCondition(command='docker', sub_command='build'),
    submit=SubmitCondition(
        command='docker',
        sub_command='push',
        validation=SubmitValidation(args_count=2),
    ),
    initial_setup=InitialSetup(
        directories=['/home/guest/docker-project'],
        files=[
            InitialFileSetup(
                path='/home/guest/docker-project/Dockerfile',
                content='FROM nginx\nCOPY . /usr/share/nginx/html\n',
            ),
        ],
        initial_path='/home/guest/docker-project',
    ),
    grading_rules=GradingRules(
        command_history=CommandHistoryRule(
            required_commands=['docker build'],
            forbidden_commands=['docker rmi', 'docker rm'],
        ),
        file_checks=[
            FileCheckRule(path='/home/guest/docker-project/Dockerfile'),
        ],
    ),
    messages=ExamMessages(
        triggered='Docker exam started! Build the image, then push it.',
        success='You handle Docker well!',
        failure='Build the image with docker build before pushing it.',
    ),
    show_details=True,
)

# Triggered by `git init`, submitted with `git commit -m MESSAGE`
GIT_EXAM = ExamConfig(
    id='git-workflow',
    title='Git Workflow Exam',
    description='Initialize a repository, add the files and commit them',
    trigger=TriggerCondition(command='git', sub_command='init'),
    submit=SubmitCondition(
        command='git',
        sub_command='commit',
        validation=SubmitValidation(args_count=2, and_args=['-m']),
    ),
    initial_setup=InitialSetup(
        directories=['/home/guest/my-project'],
        files=[
            InitialFileSetup(
                path='/home/guest/my-project/README.md',
                content='# My Project\n',
            ),
        ],
        initial_path='/home/guest/my-project',
    ),
    grading_rules=GradingRules(
        command_history=CommandHistoryRule(
            required_commands=['git init', 'git add'],
            order=['git init', 'git add'],
        ),
        file_checks=[
            FileCheckRule(path='/home/guest/my-project/.git'),
        ],
    ),
    messages=ExamMessages(
        triggered='Git exam started! Run init, add, then commit.',
        success='Your Git workflow is correct!',
        failure='Run in order: git init, git add, git commit -m "message"',
    ),
)

# Triggered by `mkdir NAME`, submitted with `cat README.md`
FILE_OPS_EXAM = ExamConfig(
    id='file-ops',
    title='File Operations Exam',
    description='Create a project directory with a README.md file inside',
    trigger=TriggerCondition(command='mkdir', args_count=1),
    submit=SubmitCondition(command='cat', sub_command='README.md'),
    initial_setup=InitialSetup(initial_path='/home/guest'),
    grading_rules=GradingRules(
        command_history=CommandHistoryRule(
            required_commands=['mkdir', 'cd', 'touch'],
        ),
        file_checks=[
            FileCheckRule(path='/home/guest/project'),
            FileCheckRule(path='/home/guest/project/README.md'),
        ],
    ),
    messages=ExamMessages(
        triggered='File operations exam started!',
        success='You handle files correctly!',
        failure='Create the project directory and README.md inside it.',
    ),
)

# Triggered by `gcc`, submitted by running `./a.out`
COMPILE_EXAM = ExamConfig(
    id='c-compile',
    title='C Compilation Exam',
    description='Compile main.c and run the program',
    trigger=TriggerCondition(command='gcc'),
    submit=SubmitCondition(command='./a.out'),
    initial_setup=InitialSetup(
        files=[
            InitialFileSetup(
                path='/home/guest/main.c',
                content='#include <stdio.h>\nint main() { printf("Hello"); return 0; }\n',
            ),
        ],
        initial_path='/home/guest',
    ),
    grading_rules=GradingRules(
        command_history=CommandHistoryRule(required_commands=['gcc']),
    ),
    messages=ExamMessages(
        triggered='Compilation exam started!',
        success='Compiled and ran successfully!',
        failure='Compile with gcc first, then run ./a.out',
    ),
)

EXAMPLE_EXAMS = [
    DOCKER_EXAM,
    GIT_EXAM,
    FILE_OPS_EXAM,
    COMPILE_EXAM,
]
