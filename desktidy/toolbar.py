"""Floating selection toolbar.

The toolbar owns no selection state. ``toolbar_state`` derives everything it
shows from (selected_count, total_count, is_all_selected); the widget renders
that state and forwards button clicks to zero-argument callbacks supplied by
the file view.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from PySide6.QtCore import QAbstractAnimation, QEasingCurve, QParallelAnimationGroup, QPoint, QPropertyAnimation, Signal
from PySide6.QtWidgets import QFrame, QGraphicsOpacityEffect, QHBoxLayout, QLabel, QPushButton

from .constants import TOOLBAR_ANIMATION_MS, TOOLBAR_BOTTOM_MARGIN, TOOLBAR_SLIDE_PX


class ToolbarVisibility(Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


@dataclass(frozen=True)
class ToolbarState:
    selected_count: int
    total_count: int
    show_all_indicator: bool
    show_select_all: bool

    @property
    def visibility(self) -> ToolbarVisibility:
        return ToolbarVisibility.VISIBLE if self.selected_count > 0 else ToolbarVisibility.HIDDEN

    @property
    def visible(self) -> bool:
        return self.visibility is ToolbarVisibility.VISIBLE

    @property
    def count_text(self) -> str:
        return f"{self.selected_count} selected"


def toolbar_state(selected_count: int, total_count: int, is_all_selected: bool) -> ToolbarState:
    return ToolbarState(
        selected_count=selected_count,
        total_count=total_count,
        show_all_indicator=selected_count == total_count,
        show_select_all=not is_all_selected,
    )


@dataclass(frozen=True)
class ToolbarActions:
    on_select_all: Callable[[], object]
    on_clear_selection: Callable[[], object]
    on_move: Callable[[], object]
    on_copy: Callable[[], object]
    on_delete: Callable[[], object]


class SelectionToolbar(QFrame):
    visibility_changed = Signal(object)  # ToolbarVisibility

    def __init__(self, actions: ToolbarActions, parent=None, animation_ms: int = TOOLBAR_ANIMATION_MS):
        super().__init__(parent)
        self.setObjectName("SelectionToolbar")
        self._actions = actions
        self._animation_ms = animation_ms
        self._state = toolbar_state(0, 0, False)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(20, 10, 20, 10)
        layout.setSpacing(8)

        self.count_label = QLabel("")
        self.count_label.setObjectName("countLabel")
        self.all_label = QLabel("(all)")
        self.all_label.setObjectName("allLabel")
        layout.addWidget(self.count_label)
        layout.addWidget(self.all_label)
        layout.addSpacing(12)

        self.select_all_btn = self._button("Select all", "Select every file in this folder", actions.on_select_all)
        self.move_btn = self._button("Move", "Move selected files to another folder", actions.on_move)
        self.copy_btn = self._button("Copy", "Copy selected files to another folder", actions.on_copy)
        self.delete_btn = self._button("Delete", "Delete selected files", actions.on_delete)
        self.delete_btn.setObjectName("deleteButton")
        self.clear_btn = self._button("✕", "Clear selection", actions.on_clear_selection)
        for btn in (self.select_all_btn, self.move_btn, self.copy_btn, self.delete_btn, self.clear_btn):
            layout.addWidget(btn)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(0.0)
        self.setGraphicsEffect(self._opacity)

        # one group, reused for every enter/exit
        self._anim = QParallelAnimationGroup(self)
        self._fade = QPropertyAnimation(self._opacity, b"opacity")
        self._slide = QPropertyAnimation(self, b"pos")
        self._anim.addAnimation(self._fade)
        self._anim.addAnimation(self._slide)
        self._anim.finished.connect(self._on_animation_finished)
        self._anim_done = None

        self.setStyleSheet("""
            QFrame#SelectionToolbar {
                background: #23272e;
                border: 1px solid #3a3f47;
                border-radius: 16px;
            }
            QLabel {
                color: #f0f0f0;
                font-size: 13px;
            }
            QLabel#countLabel {
                font-weight: 600;
            }
            QLabel#allLabel {
                color: #9aa0a6;
                font-size: 11px;
            }
            QPushButton {
                background: transparent;
                color: #fff;
                border: none;
                padding: 6px 10px;
                border-radius: 6px;
            }
            QPushButton:hover {
                background: #333;
            }
            QPushButton#deleteButton {
                color: #ff6b6b;
            }
            QPushButton#deleteButton:hover {
                background: rgba(255, 107, 107, 0.12);
            }
        """)
        self._render()
        self.hide()

    def _button(self, text: str, tooltip: str, callback: Callable[[], object]) -> QPushButton:
        btn = QPushButton(text, self)
        btn.setToolTip(tooltip)
        # clicked carries a `checked` bool; callbacks take no arguments
        btn.clicked.connect(lambda _checked=False: callback())
        return btn

    # ----- state -----
    def state(self) -> ToolbarState:
        return self._state

    @property
    def visibility(self) -> ToolbarVisibility:
        return self._state.visibility

    def is_animating(self) -> bool:
        return self._anim.state() == QAbstractAnimation.State.Running

    def update_counts(self, selected_count: int, total_count: int, is_all_selected: bool):
        previous = self._state.visibility
        self._state = toolbar_state(selected_count, total_count, is_all_selected)
        self._render()
        current = self._state.visibility
        if current is previous:
            return
        logging.debug(f"[toolbar] {previous.value} -> {current.value} ({selected_count}/{total_count})")
        if current is ToolbarVisibility.VISIBLE:
            self._enter()
        else:
            self._exit()
        self.visibility_changed.emit(current)

    def _render(self):
        s = self._state
        self.count_label.setText(s.count_text)
        self.all_label.setVisible(s.show_all_indicator)
        self.select_all_btn.setVisible(s.show_select_all)
        self.adjustSize()
        if self.isVisible():
            self.reposition()

    # ----- geometry / animation -----
    def _rest_pos(self) -> QPoint:
        parent = self.parentWidget()
        if parent is None:
            return self.pos()
        x = max(0, (parent.width() - self.width()) // 2)
        y = max(0, parent.height() - self.height() - TOOLBAR_BOTTOM_MARGIN)
        return QPoint(x, y)

    def reposition(self):
        if not self.is_animating():
            self.move(self._rest_pos())

    def _stop_animation(self):
        if self.is_animating():
            self._anim_done = None
            self._anim.stop()

    def _on_animation_finished(self):
        done, self._anim_done = self._anim_done, None
        if done is not None:
            done()

    def _animate(self, start_opacity: float, end_opacity: float, start_pos: QPoint, end_pos: QPoint, on_done):
        self._fade.setDuration(self._animation_ms)
        self._fade.setStartValue(start_opacity)
        self._fade.setEndValue(end_opacity)
        self._slide.setDuration(self._animation_ms)
        self._slide.setStartValue(start_pos)
        self._slide.setEndValue(end_pos)
        self._slide.setEasingCurve(QEasingCurve.Type.OutBack if end_opacity else QEasingCurve.Type.InCubic)
        self._anim_done = on_done
        self._anim.start()

    def _enter(self):
        self._stop_animation()
        self.adjustSize()
        rest = self._rest_pos()
        self.show()
        self.raise_()
        if self._animation_ms <= 0:
            self._opacity.setOpacity(1.0)
            self.move(rest)
            return
        start = QPoint(rest.x(), rest.y() + TOOLBAR_SLIDE_PX)
        self._animate(self._opacity.opacity(), 1.0, start, rest, lambda: None)

    def _exit(self):
        self._stop_animation()
        if self._animation_ms <= 0 or not self.isVisible():
            self._opacity.setOpacity(0.0)
            self.hide()
            return
        here = self.pos()

        def _done():
            # a selection made while animating out wins
            if self._state.visibility is ToolbarVisibility.HIDDEN:
                self.hide()

        self._animate(self._opacity.opacity(), 0.0, here, QPoint(here.x(), here.y() + TOOLBAR_SLIDE_PX), _done)


__all__ = ["SelectionToolbar", "ToolbarActions", "ToolbarState", "ToolbarVisibility", "toolbar_state"]
