"""
Small PyQt5 desktop client for the telemetry dashboard API.

The same ideas as the browser dashboard:
- Basic Auth credentials are typed once and reused for all requests.
- Statistics show up as soon as the upload returns; the AI insight is
  requested afterwards and filled in when it arrives.
- Matplotlib draws a small bar chart for the equipment type distribution.
- Worker threads handle HTTP so the window does not freeze.
"""
import sys
from typing import Any, Callable, Dict

from PyQt5.QtCore import Qt, QThread, pyqtSignal
from PyQt5.QtWidgets import (
    QApplication,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
    QFileDialog,
    QLineEdit,
    QMessageBox,
    QFormLayout,
    QListWidget,
    QListWidgetItem,
)

from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from api_client import ApiResult, DashboardClient

BUTTON_STYLE = "background-color: #0891b2; color: #020617; padding: 6px 12px; border-radius: 4px;"
PRIMARY_BUTTON_STYLE = (
    "background-color: #0f766e; color: #e5e7eb; padding: 8px 18px; border-radius: 4px;"
)
INPUT_STYLE = "background-color: #020617; color: white; border: 1px solid #374151; padding: 4px;"


class ApiWorker(QThread):
    """Runs one ``DashboardClient`` call off the GUI thread."""

    finished_with_result = pyqtSignal(object)

    def __init__(self, call: Callable[[], ApiResult]):
        super().__init__()
        self.call = call

    def run(self) -> None:
        # Emit result back to the main (GUI) thread.
        self.finished_with_result.emit(self.call())


class EquipmentChartCanvas(FigureCanvas):
    """Tiny Matplotlib canvas that draws the bar chart used in the UI."""

    def __init__(self, parent: QWidget | None = None):
        self.fig = Figure(figsize=(5, 3), facecolor="#020617")  # slate‑900
        super().__init__(self.fig)
        self.setParent(parent)
        self.ax = self.fig.add_subplot(111)
        self.fig.tight_layout()

    def plot_distribution(self, type_distribution: Dict[str, int]) -> None:
        self.ax.clear()

        if not type_distribution:
            self.ax.text(
                0.5,
                0.5,
                "No data yet",
                ha="center",
                va="center",
                color="white",
                fontsize=10,
                transform=self.ax.transAxes,
            )
        else:
            labels = list(type_distribution.keys())
            values = list(type_distribution.values())

            self.ax.bar(labels, values, color="#0891b2")  # teal accent
            self.ax.set_title("Equipment type distribution", color="white")
            self.ax.set_ylabel("Count", color="white")
            self.ax.tick_params(axis="x", labelrotation=30, labelcolor="white")
            self.ax.tick_params(axis="y", labelcolor="white")
            self.ax.set_facecolor("#020617")  # slate‑900

        self.fig.patch.set_facecolor("#020617")
        self.draw()


class MainWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Chemical Equipment Telemetry Dashboard - Desktop")
        self.setMinimumSize(960, 620)

        self.selected_file: str | None = None
        self.displayed_summary_id: str | None = None
        # Running workers must stay referenced until they finish.
        self._workers: set[ApiWorker] = set()

        self._build_ui()

    def _button(self, text: str, handler, style: str = BUTTON_STYLE) -> QPushButton:
        button = QPushButton(text)
        button.setStyleSheet(style)
        button.clicked.connect(handler)
        return button

    def _build_ui(self) -> None:
        main_layout = QVBoxLayout()
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(12)

        title = QLabel("Chemical Equipment Telemetry Dashboard")
        title.setStyleSheet("color: #0f766e; font-size: 20px; font-weight: 600;")
        main_layout.addWidget(title)

        subtitle = QLabel(
            "Upload an equipment CSV (or load sample data) to see statistics, "
            "outliers, a quality score and the type distribution."
        )
        subtitle.setStyleSheet("color: #cbd5f5; font-size: 11px;")
        main_layout.addWidget(subtitle)

        top_row = QHBoxLayout()
        top_row.setSpacing(10)

        file_column = QVBoxLayout()
        file_label = QLabel("Select equipment CSV")
        file_label.setStyleSheet("color: #e5e7eb; font-size: 11px;")
        self.file_path_label = QLabel("No file selected")
        self.file_path_label.setStyleSheet("color: #9ca3af; font-size: 10px;")
        file_column.addWidget(file_label)
        file_column.addWidget(self._button("Browse...", self.on_select_file))
        file_column.addWidget(self.file_path_label)

        auth_column = QFormLayout()
        auth_label = QLabel("Sign in (Django user)")
        auth_label.setStyleSheet("color: #e5e7eb; font-size: 11px;")
        self.username_input = QLineEdit()
        self.username_input.setPlaceholderText("Username")
        self.username_input.setStyleSheet(INPUT_STYLE)
        self.password_input = QLineEdit()
        self.password_input.setPlaceholderText("Password")
        self.password_input.setEchoMode(QLineEdit.Password)
        self.password_input.setStyleSheet(INPUT_STYLE)
        auth_column.addRow(auth_label)
        auth_column.addRow("Username:", self.username_input)
        auth_column.addRow("Password:", self.password_input)

        action_column = QVBoxLayout()
        self.upload_button = self._button("Upload CSV", self.on_upload_clicked, PRIMARY_BUTTON_STYLE)
        self.sample_button = self._button("Load Sample Data", self.on_sample_clicked)
        action_column.addWidget(self.upload_button)
        action_column.addWidget(self.sample_button)
        action_column.addWidget(self._button("Resume Last Session", self.on_resume_clicked))
        action_column.addWidget(self._button("Save PDF Report", self.on_report_clicked))
        action_column.addWidget(self._button("Clear Session", self.on_clear_clicked))

        top_row.addLayout(file_column, stretch=2)
        top_row.addLayout(auth_column, stretch=2)
        top_row.addLayout(action_column, stretch=1)
        main_layout.addLayout(top_row)

        # Info label for errors / status
        self.info_label = QLabel("")
        self.info_label.setStyleSheet("color: #fecaca; font-size: 11px;")
        main_layout.addWidget(self.info_label)

        bottom_row = QHBoxLayout()
        bottom_row.setSpacing(10)

        text_column = QVBoxLayout()
        self.stats_label = QLabel("No statistics yet.\nUpload a CSV to see results.")
        self.stats_label.setWordWrap(True)
        self.stats_label.setStyleSheet("color: #e5e7eb; font-size: 11px;")
        self.insights_label = QLabel("")
        self.insights_label.setWordWrap(True)
        self.insights_label.setStyleSheet("color: #a5f3fc; font-size: 10px;")
        text_column.addWidget(self.stats_label)
        text_column.addWidget(self.insights_label)
        text_column.addStretch()
        bottom_row.addLayout(text_column, stretch=1)

        self.chart_canvas = EquipmentChartCanvas(self)
        bottom_row.addWidget(self.chart_canvas, stretch=2)
        main_layout.addLayout(bottom_row)

        history_label = QLabel("Upload History (double-click to reopen)")
        history_label.setStyleSheet(
            "color: #e5e7eb; font-size: 14px; font-weight: 600; margin-top: 10px;"
        )
        main_layout.addWidget(history_label)

        history_header = QHBoxLayout()
        history_header.addWidget(self._button("Refresh History", self.on_refresh_history))
        history_header.addStretch()
        main_layout.addLayout(history_header)

        self.history_list = QListWidget()
        self.history_list.setStyleSheet(
            "background-color: #1e293b; color: #e5e7eb; border: 1px solid #374151; "
            "border-radius: 4px; font-size: 10px;"
        )
        self.history_list.setMaximumHeight(150)
        self.history_list.itemDoubleClicked.connect(self.on_history_item_opened)
        main_layout.addWidget(self.history_list)

        self.setLayout(main_layout)
        self.setStyleSheet("background-color: #020617;")  # slate‑900

    # Helpers -----------------------------------------------------------

    def _client(self) -> DashboardClient | None:
        username = self.username_input.text().strip()
        password = self.password_input.text().strip()
        if not username or not password:
            self._show_error("Please enter username and password.")
            return None
        return DashboardClient(username, password)

    def _start(self, call: Callable[[], ApiResult], on_done: Callable[[ApiResult], None]) -> None:
        worker = ApiWorker(call)
        self._workers.add(worker)

        def finished(result: ApiResult) -> None:
            self._workers.discard(worker)
            on_done(result)

        worker.finished_with_result.connect(finished)
        worker.start()

    def _set_busy(self, busy: bool) -> None:
        self.upload_button.setEnabled(not busy)
        self.sample_button.setEnabled(not busy)
        self.upload_button.setText("Analyzing..." if busy else "Upload CSV")

    def _show_summary(self, summary: Dict[str, Any]) -> None:
        self.displayed_summary_id = summary.get("id")
        summary_lines = [
            f"File: {summary.get('fileName', '')}",
            f"Total equipment count: {summary.get('totalCount', 0)}",
            f"Average flowrate: {summary.get('avgFlowrate', 0):.2f}",
            f"Average pressure: {summary.get('avgPressure', 0):.2f}",
            f"Average temperature: {summary.get('avgTemperature', 0):.2f}",
            f"Temperature outliers: {summary.get('outlierCount', 0)}",
            f"Data quality score: {summary.get('dataQualityScore', 0)}/100",
            f"Classification: {summary.get('classification', '')}",
        ]
        self.stats_label.setText("\n".join(summary_lines))
        self.insights_label.setText(summary.get("aiInsights") or "")
        self.chart_canvas.plot_distribution(summary.get("typeDistribution", {}))

    # Slots -------------------------------------------------------------

    def on_select_file(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Select equipment CSV", "", "CSV files (*.csv);;All files (*.*)"
        )
        if file_path:
            self.selected_file = file_path
            self.file_path_label.setText(file_path)
            self.info_label.setText("")

    def on_upload_clicked(self) -> None:
        if not self.selected_file:
            self._show_error("Please select a CSV file first.")
            return
        client = self._client()
        if client is None:
            return
        self._set_busy(True)
        self.info_label.setText("")
        file_path = self.selected_file
        self._start(lambda: client.upload_csv(file_path), self.on_analysis_finished)

    def on_sample_clicked(self) -> None:
        client = self._client()
        if client is None:
            return
        self._set_busy(True)
        self._start(client.load_sample, self.on_analysis_finished)

    def on_analysis_finished(self, result: ApiResult) -> None:
        self._set_busy(False)
        if not result.ok:
            self._show_error(result.error_message or "Upload failed.")
            return

        summary = result.payload["summary"]
        self._show_summary(summary)
        self.info_label.setText("Analysis complete. Generating insights...")
        self.on_refresh_history()
        self._request_insights(summary, result.payload.get("generation"))

    def _request_insights(self, summary: Dict[str, Any], generation: int | None) -> None:
        if summary.get("aiInsights"):
            return
        client = self._client()
        if client is None:
            return
        summary_id = summary["id"]
        self._start(lambda: client.enrich(summary_id, generation), self.on_enrich_finished)

    def on_enrich_finished(self, result: ApiResult) -> None:
        if not result.ok:
            # Insights are optional, the statistics are already on screen.
            self.info_label.setText("Insights are not available right now.")
            return
        summary = result.payload["summary"]
        if summary.get("id") != self.displayed_summary_id:
            return
        self._show_summary(summary)
        self.info_label.setText("Insights ready.")
        self.on_refresh_history()

    def on_refresh_history(self) -> None:
        username = self.username_input.text().strip()
        password = self.password_input.text().strip()
        if not username or not password:
            return
        client = DashboardClient(username, password)
        self._start(client.history, self.on_history_finished)

    def on_history_finished(self, result: ApiResult) -> None:
        if not result.ok:
            # Silently fail - history is not critical
            return

        self.history_list.clear()
        for entry in result.payload or []:
            item_text = (
                f"{entry['fileName']} - {entry['totalCount']} records, "
                f"quality {entry['dataQualityScore']} ({entry['uploadDate']})"
            )
            item = QListWidgetItem(item_text)
            item.setData(Qt.UserRole, entry["id"])
            self.history_list.addItem(item)

    def on_history_item_opened(self, item: QListWidgetItem) -> None:
        client = self._client()
        if client is None:
            return
        summary_id = item.data(Qt.UserRole)
        self._start(lambda: client.open_archived(summary_id), self.on_archived_opened)

    def on_archived_opened(self, result: ApiResult) -> None:
        if not result.ok:
            # Keep whatever is on screen; the archived batch is gone.
            self._show_error(result.error_message or "Could not open this dataset.")
            return
        summary = result.payload["summary"]
        self._show_summary(summary)
        self.info_label.setText("Archived dataset loaded.")
        self._request_insights(summary, result.payload.get("generation"))

    def on_resume_clicked(self) -> None:
        client = self._client()
        if client is None:
            return
        self._start(client.current_session, self.on_session_resumed)

    def on_session_resumed(self, result: ApiResult) -> None:
        if not result.ok:
            self.info_label.setText(result.error_message or "No saved session.")
            return
        summary = result.payload["summary"]
        self._show_summary(summary)
        self.info_label.setText("Last session restored.")
        self.on_refresh_history()
        self._request_insights(summary, result.payload.get("generation"))

    def on_report_clicked(self) -> None:
        client = self._client()
        if client is None:
            return
        destination, _ = QFileDialog.getSaveFileName(
            self, "Save report", "Equipment_Summary_Report.pdf", "PDF files (*.pdf)"
        )
        if not destination:
            return
        self._start(lambda: client.download_report(destination), self.on_report_saved)

    def on_report_saved(self, result: ApiResult) -> None:
        if not result.ok:
            self._show_error(result.error_message or "Could not generate the report.")
            return
        self.info_label.setText(f"Report saved to {result.payload}")

    def on_clear_clicked(self) -> None:
        client = self._client()
        if client is None:
            return
        self._start(client.clear_session, self.on_session_cleared)

    def on_session_cleared(self, result: ApiResult) -> None:
        if not result.ok:
            self._show_error(result.error_message or "Could not clear the session.")
            return
        self.displayed_summary_id = None
        self.stats_label.setText("No statistics yet.\nUpload a CSV to see results.")
        self.insights_label.setText("")
        self.chart_canvas.plot_distribution({})
        self.info_label.setText("Session cleared.")

    def _show_error(self, message: str) -> None:
        self.info_label.setText(message)
        msg_box = QMessageBox(self)
        msg_box.setIcon(QMessageBox.Warning)
        msg_box.setWindowTitle("Error")
        msg_box.setText(message)
        msg_box.exec_()


def main() -> None:
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
