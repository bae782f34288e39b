"""Main window: profile picker, typing screen and session summary."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from keystride.core.layouts import MAX_LEVEL
from keystride.core.modes import AdaptiveMode, LevelMode, RoundMode, TimedMode
from keystride.core.progress import ProgressStore, RecordResult
from keystride.core.session import BACKSPACE, RoundState, TypingSession
from keystride.core.stats import SnapshotError, UserProfile
from keystride.ui.colors import Palette
from keystride.ui.formatting import format_accuracy, format_countdown, format_play_time, format_wpm
from keystride.ui.models import build_word_states
from keystride.ui.typing_widgets import KeyFeedbackLabel, WordStreamWidget

logger = logging.getLogger(__name__)

AVATARS = ["🐱", "🐶", "🦁", "🐼", "🦊", "🐸", "🦄", "🤖", "👽", "👻"]
WORD_WINDOW = 12


class MainWindow(QMainWindow):
    """Two screens: choose a profile, then type rounds until the window closes."""

    def __init__(self, session: TypingSession, progress_store: ProgressStore) -> None:
        super().__init__()
        self._session = session
        self._store = progress_store
        self._unlock_all_levels = os.environ.get("KEYSTRIDE_UNLOCK_ALL") == "1"
        self._round_recorded = True

        self._stack: Optional[QStackedWidget] = None
        self._profile_list: Optional[QListWidget] = None
        self._name_edit: Optional[QLineEdit] = None
        self._avatar_combo: Optional[QComboBox] = None
        self._title_label: Optional[QLabel] = None
        self._level_spin: Optional[QSpinBox] = None
        self._word_stream: Optional[WordStreamWidget] = None
        self._key_feedback: Optional[KeyFeedbackLabel] = None
        self._wpm_label: Optional[QLabel] = None
        self._accuracy_label: Optional[QLabel] = None
        self._time_label: Optional[QLabel] = None
        self._weak_button: Optional[QPushButton] = None

        self.setWindowTitle("Keystride")
        self.setFocusPolicy(Qt.StrongFocus)
        self.setStyleSheet(
            f"QMainWindow, QWidget {{ background: {Palette.BACKGROUND}; color: {Palette.TEXT_PRIMARY}; }}"
            f"QPushButton {{ background: {Palette.SURFACE_RAISED}; padding: 6px 12px; border-radius: 6px; }}"
        )
        self._build_ui()
        self._refresh_profiles()

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(250)
        self._refresh_timer.timeout.connect(self._refresh_typing_screen)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._stack.addWidget(self._build_profile_screen())
        self._stack.addWidget(self._build_typing_screen())
        self.setCentralWidget(self._stack)

    def _build_profile_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        title = QLabel("Keystride")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 40px; font-weight: 700;")
        layout.addWidget(title)
        subtitle = QLabel("Select a profile to start")
        subtitle.setAlignment(Qt.AlignCenter)
        subtitle.setStyleSheet(f"color: {Palette.TEXT_MUTED}; font-size: 18px;")
        layout.addWidget(subtitle)

        self._profile_list = QListWidget()
        self._profile_list.itemActivated.connect(self._on_profile_activated)
        layout.addWidget(self._profile_list, 1)

        create_row = QHBoxLayout()
        self._name_edit = QLineEdit()
        self._name_edit.setPlaceholderText("Name")
        self._avatar_combo = QComboBox()
        self._avatar_combo.addItems(AVATARS)
        create_button = QPushButton("Add Player")
        create_button.clicked.connect(self._create_profile)
        create_row.addWidget(self._name_edit, 1)
        create_row.addWidget(self._avatar_combo)
        create_row.addWidget(create_button)
        layout.addLayout(create_row)

        io_row = QHBoxLayout()
        import_button = QPushButton("Import…")
        import_button.clicked.connect(self._import_profiles)
        export_button = QPushButton("Export…")
        export_button.clicked.connect(self._export_profiles)
        io_row.addStretch(1)
        io_row.addWidget(import_button)
        io_row.addWidget(export_button)
        layout.addLayout(io_row)
        return screen

    def _build_typing_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)

        header = QHBoxLayout()
        back_button = QPushButton("Profiles")
        back_button.clicked.connect(self._show_profile_screen)
        self._title_label = QLabel()
        self._title_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        self._level_spin = QSpinBox()
        self._level_spin.setPrefix("Level ")
        self._level_spin.valueChanged.connect(self._on_level_changed)
        header.addWidget(back_button)
        header.addWidget(self._title_label, 1)
        header.addWidget(self._level_spin)
        layout.addLayout(header)

        modes = QHBoxLayout()
        for text, mode in (
            ("Normal Levels", LevelMode()),
            ("Timed (1 min)", TimedMode(60)),
            ("Timed (5 min)", TimedMode(300)),
        ):
            button = QPushButton(text)
            button.clicked.connect(lambda _=False, m=mode: self._start_round(m))
            modes.addWidget(button)
        self._weak_button = QPushButton("Train Weakest Keys")
        self._weak_button.clicked.connect(self._train_weak_keys)
        modes.addWidget(self._weak_button)
        end_button = QPushButton("End Session")
        end_button.clicked.connect(self._end_session)
        modes.addStretch(1)
        modes.addWidget(end_button)
        layout.addLayout(modes)

        stats = QHBoxLayout()
        self._wpm_label = QLabel()
        self._accuracy_label = QLabel()
        self._time_label = QLabel()
        for label in (self._wpm_label, self._accuracy_label, self._time_label):
            label.setStyleSheet("font-size: 22px;")
            stats.addWidget(label)
        stats.addStretch(1)
        self._key_feedback = KeyFeedbackLabel()
        stats.addWidget(self._key_feedback)
        layout.addLayout(stats)

        self._word_stream = WordStreamWidget()
        layout.addWidget(self._word_stream, 1)

        # keys must reach keyPressEvent, so no control here may hold focus
        for control in screen.findChildren(QPushButton) + [self._level_spin]:
            control.setFocusPolicy(Qt.NoFocus)
        return screen

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def _refresh_profiles(self) -> None:
        if self._profile_list is None:
            return
        self._profile_list.clear()
        for profile in self._store.profiles():
            item = QListWidgetItem(f"{profile.avatar}  {profile.name}   ·   Level {profile.current_level}")
            item.setData(Qt.UserRole, profile.id)
            self._profile_list.addItem(item)

    def _create_profile(self) -> None:
        name = self._name_edit.text().strip() if self._name_edit else ""
        if not name:
            return
        profile = self._store.create_profile(name, self._avatar_combo.currentText())
        self._name_edit.clear()
        self._refresh_profiles()
        self._open_profile(profile)

    def _on_profile_activated(self, item: QListWidgetItem) -> None:
        profile = self._store.select_profile(item.data(Qt.UserRole))
        self._open_profile(profile)

    def _open_profile(self, profile: UserProfile) -> None:
        self._session.set_level(profile.current_level)
        self._sync_level_picker(profile)
        self._stack.setCurrentIndex(1)
        self._start_round(LevelMode())

    def _show_profile_screen(self) -> None:
        self._session.finish_round()
        self._refresh_timer.stop()
        self._refresh_profiles()
        self._stack.setCurrentIndex(0)

    def _import_profiles(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import profiles", str(Path.home()), "JSON (*.json)")
        if not path:
            return
        try:
            result = self._store.import_snapshot(Path(path).read_bytes())
        except (OSError, SnapshotError) as e:
            logger.warning("Import from %s failed: %s", path, e)
            QMessageBox.warning(self, "Import failed", f"Could not import profiles:\n{e}")
            return
        self._refresh_profiles()
        QMessageBox.information(
            self, "Import complete", f"{result.added} added, {result.replaced} replaced."
        )

    def _export_profiles(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export profiles", str(Path.home() / "keystride-profiles.json"), "JSON (*.json)"
        )
        if not path:
            return
        try:
            Path(path).write_text(self._store.export_all(), encoding="utf-8")
        except OSError as e:
            logger.warning("Export to %s failed: %s", path, e)
            QMessageBox.warning(self, "Export failed", f"Could not write {path}:\n{e}")

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def _sync_level_picker(self, profile: UserProfile) -> None:
        if self._level_spin is None:
            return
        top = MAX_LEVEL if self._unlock_all_levels else profile.max_unlocked_level
        self._level_spin.blockSignals(True)
        self._level_spin.setRange(1, top)
        self._level_spin.setValue(min(profile.current_level, top))
        self._level_spin.blockSignals(False)

    def _on_level_changed(self, level: int) -> None:
        self._session.set_level(level)
        self._start_round(LevelMode())

    def _start_round(self, mode: RoundMode) -> None:
        self._session.start_round(mode)
        self._round_recorded = False
        self._level_spin.setEnabled(isinstance(mode, LevelMode))
        profile = self._store.current_profile
        name = f"{profile.avatar} {profile.name}" if profile else ""
        self._title_label.setText(f"{name}   ·   {mode.display_name}")
        self._refresh_typing_screen()
        self._refresh_timer.start()
        self.setFocus()

    def _train_weak_keys(self) -> None:
        self._start_round(AdaptiveMode(tuple(self._session.worst_keys())))

    def _end_session(self) -> None:
        self._session.finish_round()
        self._refresh_typing_screen()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if self._stack is None or self._stack.currentIndex() != 1:
            super().keyPressEvent(event)
            return
        key = event.key()
        if key == Qt.Key.Key_Backspace:
            raw = BACKSPACE
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            raw = "\n"
        elif key == Qt.Key.Key_Space:
            raw = " "
        elif event.text() and event.text().isprintable():
            raw = event.text()
        else:
            super().keyPressEvent(event)
            return
        self._session.submit_key(raw)
        self._refresh_typing_screen()

    def _refresh_typing_screen(self) -> None:
        session = self._session
        self._word_stream.set_words(
            build_word_states(
                session.target_words,
                session.submitted_inputs,
                session.current_word_index,
                session.current_input,
                window=WORD_WINDOW,
            )
        )
        self._key_feedback.show_event(session.last_key_event)
        self._wpm_label.setText(f"WPM {format_wpm(session.wpm)}")
        self._accuracy_label.setText(f"Acc {format_accuracy(session.accuracy)}")
        if isinstance(session.mode, TimedMode):
            self._time_label.setText(format_countdown(session.time_remaining))
        else:
            self._time_label.setText(format_countdown(session.elapsed_seconds()))
        self._weak_button.setEnabled(bool(session.key_stats))

        if session.state is RoundState.FINISHED and not self._round_recorded:
            self._round_recorded = True
            self._refresh_timer.stop()
            self._complete_round()

    def _complete_round(self) -> None:
        profile = self._store.current_profile
        if profile is None or self._session.start_time is None:
            return
        result = self._store.record_session(profile.id, self._session.summary())
        self._session.set_level(result.profile.current_level)
        self._sync_level_picker(result.profile)
        self._show_summary(result)

    def _show_summary(self, result: RecordResult) -> None:
        session = self._session
        stat = result.level_stat
        lines = [
            f"WPM: {format_wpm(session.wpm)}    Acc: {format_accuracy(session.accuracy)}",
            f"Best on level: {format_wpm(stat.best_wpm)} WPM, {format_accuracy(stat.best_accuracy)}",
            f"Trend: {'▲' if result.improved else '▼'}",
            f"Total on level: {format_play_time(stat.total_time)}",
            f"Total playtime: {format_play_time(result.profile.stats.total_time_played)}",
        ]
        weak = session.worst_keys()
        if weak:
            lines.append("Needs improvement: " + "  ".join(k.upper() for k in weak))

        box = QMessageBox(self)
        box.setWindowTitle("Keystride")
        box.setText("Level Up! 🔓" if result.unlocked else "Session Summary")
        box.setInformativeText("\n".join(lines))
        train = box.addButton("Train These Keys Now", QMessageBox.AcceptRole) if weak else None
        box.addButton("Close", QMessageBox.RejectRole)
        box.exec()

        if train is not None and box.clickedButton() is train:
            self._start_round(AdaptiveMode(tuple(weak)))
        else:
            self._start_round(LevelMode())

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the round timer and persist profiles when closing the app."""
        self._session.close()
        self._store.save()
        super().closeEvent(event)
