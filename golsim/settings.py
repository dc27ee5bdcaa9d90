import torch
from PyQt5.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLineEdit,
                             QSpinBox, QDoubleSpinBox, QPushButton, QCheckBox,
                             QComboBox, QGroupBox, QFormLayout)

from .config import SimulationConfig
from .constants import SAVING_TYPES


class CellSizeSpinBox(QSpinBox):
    """Steps through cell sizes that tile the current width and height exactly."""

    def __init__(self, width_spin, height_spin, parent=None):
        super().__init__(parent)
        self.width_spin = width_spin
        self.height_spin = height_spin
        self.setRange(1, 200)

    def valid_sizes(self):
        width, height = self.width_spin.value(), self.height_spin.value()
        return [s for s in range(self.minimum(), self.maximum() + 1)
                if width % s == 0 and height % s == 0]

    def stepBy(self, steps):
        sizes = self.valid_sizes()
        if not sizes:
            return
        current = self.value()
        if steps > 0:
            larger = [s for s in sizes if s > current]
            self.setValue(larger[min(steps, len(larger)) - 1] if larger else sizes[-1])
        else:
            smaller = [s for s in sizes if s < current]
            self.setValue(smaller[-min(-steps, len(smaller))] if smaller else sizes[0])


class SettingsDialog(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Game of Life Settings")
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout()

        # Grid Settings
        grid_group = QGroupBox("Grid Settings")
        grid_layout = QFormLayout()

        self.width_spin = QSpinBox()
        self.width_spin.setRange(10, 8000)
        self.width_spin.setSingleStep(10)
        grid_layout.addRow("Width (px):", self.width_spin)

        self.height_spin = QSpinBox()
        self.height_spin.setRange(10, 8000)
        self.height_spin.setSingleStep(10)
        grid_layout.addRow("Height (px):", self.height_spin)

        self.cell_size_spin = CellSizeSpinBox(self.width_spin, self.height_spin)
        grid_layout.addRow("Cell Size (px):", self.cell_size_spin)

        self.density_spin = QDoubleSpinBox()
        self.density_spin.setRange(0.0, 1.0)
        self.density_spin.setSingleStep(0.05)
        self.density_spin.setDecimals(2)
        grid_layout.addRow("Initial Density:", self.density_spin)

        grid_group.setLayout(grid_layout)
        layout.addWidget(grid_group)

        # Animation Settings
        anim_group = QGroupBox("Animation Settings")
        anim_layout = QFormLayout()

        self.interval_spin = QSpinBox()
        self.interval_spin.setRange(0, 5000)
        self.interval_spin.setSingleStep(50)
        anim_layout.addRow("Step Interval (ms):", self.interval_spin)

        anim_group.setLayout(anim_layout)
        layout.addWidget(anim_group)

        # Engine Settings
        engine_group = QGroupBox("Engine Settings")
        engine_layout = QFormLayout()

        self.engine_combo = QComboBox()
        self.engine_combo.addItem("Cell lattice", "lattice")
        self.engine_combo.addItem("Tensor (torch)", "tensor")
        engine_layout.addRow("Engine:", self.engine_combo)

        self.workers_spin = QSpinBox()
        self.workers_spin.setRange(1, 64)
        engine_layout.addRow("Worker Threads:", self.workers_spin)

        self.device_combo = QComboBox()
        if torch.cuda.is_available():
            self.device_combo.addItem("CUDA (GPU)", "cuda")
            self.device_combo.addItem("CPU", "cpu")
        else:
            self.device_combo.addItem("CPU (CUDA not available)", "cpu")
        engine_layout.addRow("Device:", self.device_combo)

        engine_group.setLayout(engine_layout)
        layout.addWidget(engine_group)

        # Recording Settings
        record_group = QGroupBox("Recording Settings")
        record_layout = QFormLayout()

        self.record_check = QCheckBox("Record video")
        record_layout.addRow(self.record_check)

        self.saving_combo = QComboBox()
        for saving_type in SAVING_TYPES:
            self.saving_combo.addItem(saving_type.capitalize(), saving_type)
        record_layout.addRow("Buffer Frames In:", self.saving_combo)

        self.still_frames_check = QCheckBox("Only record new generations")
        record_layout.addRow(self.still_frames_check)

        self.record_seconds_spin = QDoubleSpinBox()
        self.record_seconds_spin.setRange(0.0, 3600.0)
        self.record_seconds_spin.setDecimals(1)
        self.record_seconds_spin.setSpecialValueText("Until closed")
        record_layout.addRow("Target Length (s):", self.record_seconds_spin)

        self.fps_spin = QSpinBox()
        self.fps_spin.setRange(1, 240)
        record_layout.addRow("Video FPS:", self.fps_spin)

        self.output_edit = QLineEdit()
        record_layout.addRow("Output File:", self.output_edit)

        record_group.setLayout(record_layout)
        layout.addWidget(record_group)

        # Buttons
        button_layout = QHBoxLayout()
        self.ok_button = QPushButton("Start Simulation")
        self.cancel_button = QPushButton("Cancel")
        button_layout.addWidget(self.ok_button)
        button_layout.addWidget(self.cancel_button)
        layout.addLayout(button_layout)

        self.setLayout(layout)

        # Connect signals
        self.ok_button.clicked.connect(self.accept)
        self.cancel_button.clicked.connect(self.reject)

        self.load_config(SimulationConfig())

    def load_config(self, config):
        self.width_spin.setValue(config.width)
        self.height_spin.setValue(config.height)
        self.cell_size_spin.setValue(config.cell_size)
        self.density_spin.setValue(config.initial_density)
        self.interval_spin.setValue(config.step_interval_ms)
        self.engine_combo.setCurrentIndex(self.engine_combo.findData(config.engine))
        self.workers_spin.setValue(config.workers or 1)
        device_index = self.device_combo.findData(config.device)
        self.device_combo.setCurrentIndex(device_index if device_index >= 0 else 0)
        self.record_check.setChecked(config.record)
        self.saving_combo.setCurrentIndex(self.saving_combo.findData(config.saving_type))
        self.still_frames_check.setChecked(config.still_frames)
        self.record_seconds_spin.setValue(config.record_seconds or 0.0)
        self.fps_spin.setValue(config.record_fps)
        self.output_edit.setText(config.output)
        self._base_config = config

    def to_config(self):
        workers = self.workers_spin.value()
        record_seconds = self.record_seconds_spin.value()
        return SimulationConfig(
            width=self.width_spin.value(),
            height=self.height_spin.value(),
            cell_size=self.cell_size_spin.value(),
            step_interval_ms=self.interval_spin.value(),
            initial_density=self.density_spin.value(),
            random_seed=self._base_config.random_seed,
            engine=self.engine_combo.currentData(),
            device=self.device_combo.currentData(),
            workers=workers if workers > 1 else None,
            record=self.record_check.isChecked(),
            saving_type=self.saving_combo.currentData(),
            still_frames=self.still_frames_check.isChecked(),
            record_seconds=record_seconds if record_seconds > 0 else None,
            record_fps=self.fps_spin.value(),
            output=self.output_edit.text() or self._base_config.output,
            frames_dir=self._base_config.frames_dir,
        )
