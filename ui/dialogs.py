"""Dialog helpers used by the workout screen."""

from __future__ import annotations

from typing import Callable

from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog


class ConfirmDialog(MDDialog):
    """Yes/no question calling ``on_answer`` with the user's choice.

    Dismissing the dialog without pressing a button counts as "no".
    """

    def __init__(
        self,
        text: str,
        on_answer: Callable[[bool], None],
        *,
        confirm_text: str = "Delete",
        **kwargs,
    ):
        self.on_answer = on_answer
        self._answered = False
        buttons = [
            MDFlatButton(text="Cancel", on_release=lambda *_: self._answer(False)),
            MDRaisedButton(text=confirm_text, on_release=lambda *_: self._answer(True)),
        ]
        super().__init__(text=text, buttons=buttons, **kwargs)
        self.bind(on_dismiss=lambda *_: self._answer(False))

    def _answer(self, value: bool) -> None:
        if self._answered:
            return
        self._answered = True
        self.dismiss()
        self.on_answer(value)
