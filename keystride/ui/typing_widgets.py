"""Typing screen widgets: the word stream and the key feedback badge."""

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QColor, QFontMetrics, QPainter
from PySide6.QtWidgets import QLabel, QWidget

from keystride.core.stats import KeyEvent
from keystride.ui.colors import Palette, key_feedback_color
from keystride.ui.models import RenderedWord, WordState


class WordStreamWidget(QWidget):
    """One line of target words: done (green), missed (red), active, upcoming."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._words: List[RenderedWord] = []
        self.setMinimumHeight(80)
        self.setMinimumWidth(400)

    def set_words(self, words: List[RenderedWord]) -> None:
        self._words = list(words)
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if not self._words:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        font = painter.font()
        font.setPointSize(22)
        painter.setFont(font)
        metrics = QFontMetrics(font)
        space = metrics.horizontalAdvance(" ")
        x = 16
        y = (self.height() + metrics.ascent() - metrics.descent()) // 2

        for word in self._words:
            if x > self.width():
                break
            if word.state is WordState.ACTIVE:
                x = self._paint_active(painter, metrics, word, x, y)
            else:
                color = {
                    WordState.COMPLETED: Palette.WORD_DONE,
                    WordState.MISSED: Palette.WORD_MISSED,
                    WordState.PENDING: Palette.WORD_PENDING,
                }[word.state]
                painter.setPen(QColor(color))
                painter.drawText(x, y, word.text)
                x += metrics.horizontalAdvance(word.text)
            x += space

    def _paint_active(self, painter: QPainter, metrics: QFontMetrics, word: RenderedWord, x: int, y: int) -> int:
        # typed characters over the target, then the untyped remainder, then any excess
        for i, char in enumerate(word.text):
            if i < len(word.typed):
                ok = word.typed[i] == char
                painter.setPen(QColor(Palette.CHAR_CORRECT if ok else Palette.CHAR_WRONG))
            else:
                painter.setPen(QColor(Palette.ACCENT))
            painter.drawText(x, y, char)
            if i == len(word.typed):
                painter.fillRect(x, y + 4, metrics.horizontalAdvance(char), 2, QColor(Palette.ACCENT))
            x += metrics.horizontalAdvance(char)
        excess = word.typed[len(word.text):]
        if excess:
            painter.setPen(QColor(Palette.CHAR_WRONG))
            painter.drawText(x, y, excess)
            x += metrics.horizontalAdvance(excess)
        return x


class KeyFeedbackLabel(QLabel):
    """Badge showing the last judged key, fading out over half a second."""

    FADE_STEPS = 10

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setFixedSize(72, 72)
        self._event: Optional[KeyEvent] = None
        self._step = self.FADE_STEPS
        self._fade_timer = QTimer(self)
        self._fade_timer.setInterval(50)
        self._fade_timer.timeout.connect(self._advance_fade)
        self._apply_style(Palette.SURFACE)

    def show_event(self, event: Optional[KeyEvent]) -> None:
        if event is None or event is self._event:
            return
        self._event = event
        self._step = 0
        self.setText("␣" if event.char == " " else event.char)
        self._apply_style(key_feedback_color(event.is_correct, 0.0))
        self._fade_timer.start()

    def _advance_fade(self) -> None:
        self._step += 1
        if self._event is None or self._step >= self.FADE_STEPS:
            self._fade_timer.stop()
            self._apply_style(Palette.SURFACE)
            return
        self._apply_style(key_feedback_color(self._event.is_correct, self._step / self.FADE_STEPS))

    def _apply_style(self, background: str) -> None:
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {background};
                color: {Palette.TEXT_PRIMARY};
                border-radius: 12px;
                font-size: 32px;
                font-weight: 700;
            }}
            """
        )
