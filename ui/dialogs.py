"""Confirmation prompt backed by a KivyMD dialog.

:class:`ConfirmDialogPrompt` implements the ``ask(text, on_confirm,
on_cancel)`` interface the session controller uses for its yes/no gates.
Dismissing the dialog any other way than the Confirm button counts as a
cancel.
"""

from __future__ import annotations

from typing import Callable

from kivymd.uix.button import MDFlatButton
from kivymd.uix.dialog import MDDialog


class ConfirmDialogPrompt:
    """Ask a yes/no question with an ``MDDialog``."""

    def __init__(self, confirm_text: str = "Confirm", cancel_text: str = "Cancel"):
        self.confirm_text = confirm_text
        self.cancel_text = cancel_text
        self._dialog = None

    def ask(
        self,
        text: str,
        on_confirm: Callable[[], object],
        on_cancel: Callable[[], object],
    ) -> None:
        answered = False

        def _confirm(*_):
            nonlocal answered
            answered = True
            dialog.dismiss()
            on_confirm()

        def _cancel(*_):
            nonlocal answered
            answered = True
            dialog.dismiss()
            on_cancel()

        def _dismissed(*_):
            # tapping outside the dialog closes it without an answer
            if not answered:
                on_cancel()

        dialog = MDDialog(
            text=text,
            buttons=[
                MDFlatButton(text=self.cancel_text, on_release=_cancel),
                MDFlatButton(text=self.confirm_text, on_release=_confirm),
            ],
        )
        dialog.bind(on_dismiss=_dismissed)
        self._dialog = dialog
        dialog.open()
