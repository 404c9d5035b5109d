"""
Operator: the person answering questions during a run.

The orchestration code only sees the abstract `Operator`; `ConsoleOperator`
renders the questions in a terminal with rich.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt


# Returns an error message for an invalid custom answer, None when valid
Validator = Callable[[str], Optional[str]]


class Operator(ABC):
    """Typed questions asked during a run"""

    @abstractmethod
    async def confirm(self, message: str, default: bool) -> bool:
        """Yes/no question"""

    @abstractmethod
    async def choose_one(self, message: str, choices: Sequence[str],
                         default: Optional[str] = None, allow_custom: bool = False,
                         validate: Optional[Validator] = None) -> str:
        """
        Pick one of `choices`.

        Args:
            message: Question text
            choices: Offered answers, in display order
            default: Answer used when the operator just presses enter
            allow_custom: Whether an answer outside `choices` is accepted
            validate: Checks custom answers
        """

    @abstractmethod
    async def choose_many(self, message: str, choices: Sequence[str]) -> List[str]:
        """Pick any subset of `choices` (possibly empty)"""

    @abstractmethod
    async def inform(self, message: str) -> None:
        """Show a status line"""

    @abstractmethod
    async def warn(self, message: str) -> None:
        """Show a problem the run is reporting"""


class ConsoleOperator(Operator):
    """Interactive terminal operator"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    async def confirm(self, message: str, default: bool) -> bool:
        return Confirm.ask(escape(message), default=default, console=self.console)

    async def choose_one(self, message: str, choices: Sequence[str],
                         default: Optional[str] = None, allow_custom: bool = False,
                         validate: Optional[Validator] = None) -> str:
        choices = list(choices)
        self.console.print(f"[bold]{escape(message)}[/bold]")
        for index, choice in enumerate(choices, 1):
            marker = " (default)" if choice == default else ""
            self.console.print(f"  {index}) {escape(choice)}{marker}")
        hint = "number or name" if allow_custom else "number"

        while True:
            answer = Prompt.ask(escape(f"Select [{hint}]"), default=default or "", console=self.console,
                                show_default=bool(default)).strip()
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1]
            if answer in choices:
                return answer
            if allow_custom and answer:
                error = validate(answer) if validate else None
                if error is None:
                    return answer
                self.console.print(f"[red]{escape(error)}[/red]")
                continue
            self.console.print("[red]Please pick one of the listed options.[/red]")

    async def choose_many(self, message: str, choices: Sequence[str]) -> List[str]:
        choices = list(choices)
        self.console.print(f"[bold]{escape(message)}[/bold]")
        for index, choice in enumerate(choices, 1):
            self.console.print(f"  {index}) {escape(choice)}")

        while True:
            answer = Prompt.ask(escape("Select [comma separated numbers, empty for none]"),
                                default="", show_default=False, console=self.console)
            parts = [part.strip() for part in answer.split(",") if part.strip()]
            if all(part.isdigit() and 1 <= int(part) <= len(choices) for part in parts):
                picked = {int(part) - 1 for part in parts}
                return [choice for index, choice in enumerate(choices) if index in picked]
            self.console.print("[red]Use the numbers shown, separated by commas.[/red]")

    async def inform(self, message: str) -> None:
        self.console.print(escape(message))

    async def warn(self, message: str) -> None:
        self.console.print(f"[bold red]{escape(message)}[/bold red]")
