"""App Kivy: seleccion de hora, carga de lecturas, grafico, tabla y resumen."""

from __future__ import annotations

import tempfile
from pathlib import Path

from hourly_glucose.chart import render_chart
from hourly_glucose.excel_writer import ExcelLayout, export_path, write_readings_xlsx
from hourly_glucose.model import TIME_BLOCKS, ReadingSet, next_hour
from hourly_glucose.session import Notification, TrackerSession
from hourly_glucose.stats import (
    RangeClassification,
    SummaryStatistics,
    classify,
    format_hour,
    format_mg_dl,
    format_statistics,
    status_label,
)
from hourly_glucose.storage import SQLiteStore

RGBA = tuple[float, float, float, float]

DEFAULT_BUTTON_COLOR: RGBA = (1.0, 1.0, 1.0, 1.0)
SELECTED_BUTTON_COLOR: RGBA = (0.23, 0.51, 0.96, 1.0)
STATUS_COLORS: dict[RangeClassification, RGBA] = {
    RangeClassification.LOW: (0.94, 0.27, 0.27, 1.0),
    RangeClassification.NORMAL: (0.13, 0.77, 0.37, 1.0),
    RangeClassification.HIGH: (0.98, 0.45, 0.09, 1.0),
}
NO_DATA_TEXT = "Sin lecturas todavia.\nAgrega lecturas para ver el resumen."


def run_app() -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.core.window import Window
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.checkbox import CheckBox
    from kivy.uix.gridlayout import GridLayout
    from kivy.uix.image import Image
    from kivy.uix.label import Label
    from kivy.uix.popup import Popup
    from kivy.uix.scrollview import ScrollView
    from kivy.uix.tabbedpanel import TabbedPanel, TabbedPanelItem
    from kivy.uix.textinput import TextInput

    class HourlyGlucoseApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.session = TrackerSession.open(
                SQLiteStore(Path.cwd() / "hourly_glucose.sqlite3")
            )
            self.chart_path = Path(tempfile.gettempdir()) / "hourly_glucose_chart.png"
            self.hour_buttons: dict[int, Button] = {}
            self.value_input: TextInput | None = None
            self.value_label: Label | None = None
            self.next_label: Label | None = None
            self.status: Label | None = None
            self.stats_label: Label | None = None
            self.chart: Image | None = None
            self.table: GridLayout | None = None

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(
                Label(
                    text="Glucosa por hora: elegi la hora y carga el valor en mg/dL.",
                    size_hint_y=None,
                    height=32,
                )
            )

            actions = BoxLayout(
                orientation="horizontal",
                spacing=8,
                size_hint_y=None,
                height=40,
            )
            export_btn = Button(text="Exportar Excel")
            clear_btn = Button(text="Borrar todo")
            exit_btn = Button(text="Salir")
            export_btn.bind(on_press=self._on_export)
            clear_btn.bind(on_press=self._confirm_clear_all)
            exit_btn.bind(on_press=lambda *_args: self.stop())
            actions.add_widget(export_btn)
            actions.add_widget(clear_btn)
            actions.add_widget(exit_btn)
            root.add_widget(actions)

            self.status = Label(text="", size_hint_y=None, height=28)
            root.add_widget(self.status)

            top = BoxLayout(orientation="horizontal", spacing=12)
            top.add_widget(self._build_entry_panel())
            self.stats_label = Label(text="", halign="left", valign="top")
            self.stats_label.bind(size=self.stats_label.setter("text_size"))
            top.add_widget(self.stats_label)
            root.add_widget(top)

            root.add_widget(self._build_tabs())

            self._refresh()
            if self.session.startup_notice is not None:
                self._notify(self.session.startup_notice)
            return root

        def _build_entry_panel(self) -> BoxLayout:
            panel = BoxLayout(orientation="vertical", spacing=4)
            for block in TIME_BLOCKS:
                panel.add_widget(Label(text=block.name, size_hint_y=None, height=22))
                grid = GridLayout(cols=6, spacing=4, size_hint_y=None, height=34)
                for hour in block.hours:
                    btn = Button(text=format_hour(hour))
                    btn.bind(on_press=lambda _btn, h=hour: self._on_select_hour(h))
                    self.hour_buttons[hour] = btn
                    grid.add_widget(btn)
                panel.add_widget(grid)

            header = BoxLayout(orientation="horizontal", size_hint_y=None, height=30)
            self.value_label = Label(text="")
            self.next_label = Label(text="", size_hint_x=0.5)
            auto = CheckBox(active=self.session.auto_advance, size_hint_x=0.15)
            auto.bind(active=lambda _chk, value: self._on_auto_advance(value))
            header.add_widget(self.value_label)
            header.add_widget(self.next_label)
            header.add_widget(Label(text="Auto-avance", size_hint_x=0.35))
            header.add_widget(auto)
            panel.add_widget(header)

            row = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            self.value_input = TextInput(
                hint_text="Glucosa (mg/dL)",
                multiline=False,
                input_filter="float",
            )
            self.value_input.bind(on_text_validate=self._on_add)
            add_btn = Button(text="Agregar", size_hint_x=0.3)
            add_btn.bind(on_press=self._on_add)
            row.add_widget(self.value_input)
            row.add_widget(add_btn)
            panel.add_widget(row)
            return panel

        def _build_tabs(self) -> TabbedPanel:
            panel = TabbedPanel(do_default_tab=False)

            chart_tab = TabbedPanelItem(text="Grafico")
            self.chart = Image(fit_mode="contain")
            chart_tab.add_widget(self.chart)
            panel.add_widget(chart_tab)

            table_tab = TabbedPanelItem(text="Tabla")
            self.table = GridLayout(cols=1, spacing=4, size_hint_y=None)
            self.table.bind(minimum_height=self.table.setter("height"))
            scroll = ScrollView()
            scroll.add_widget(self.table)
            table_tab.add_widget(scroll)
            panel.add_widget(table_tab)
            return panel

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _on_select_hour(self, hour: int) -> None:
            self.session.select_hour(hour)
            self._refresh_entry()

        def _on_auto_advance(self, enabled: bool) -> None:
            failure = self.session.set_auto_advance(enabled)
            if failure is not None:
                self._notify(failure)
            self._refresh_entry()

        def _on_add(self, _: object) -> None:
            if self.value_input is None:
                return
            notification = self.session.add_reading(self.value_input.text)
            self._notify(notification)
            if not notification.rejected:
                self.value_input.text = ""
            self._refresh()
            self.value_input.focus = True

        def _open_edit_popup(self, hour: int) -> None:
            current = self.session.readings.get(hour)
            inp = TextInput(
                text=format_mg_dl(current),
                multiline=False,
                input_filter="float",
            )
            error = Label(text="", color=STATUS_COLORS[RangeClassification.LOW])
            buttons = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            cancel_btn = Button(text="Cancelar")
            save_btn = Button(text="Guardar")
            buttons.add_widget(cancel_btn)
            buttons.add_widget(save_btn)

            content = BoxLayout(orientation="vertical", spacing=6, padding=6)
            content.add_widget(inp)
            content.add_widget(error)
            content.add_widget(buttons)
            popup = Popup(
                title=f"Editar lectura de las {format_hour(hour)}",
                content=content,
                size_hint=(0.5, 0.4),
            )

            def save(*_: object) -> None:
                notification = self.session.update_reading(hour, inp.text)
                if notification.rejected:
                    error.text = notification.message
                    return
                popup.dismiss()
                self._notify(notification)
                self._refresh()

            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())
            save_btn.bind(on_press=save)
            inp.bind(on_text_validate=save)
            popup.open()

        def _on_delete(self, hour: int) -> None:
            self._notify(self.session.delete_reading(hour))
            self._refresh()

        def _confirm_clear_all(self, _: object) -> None:
            buttons = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            cancel_btn = Button(text="Cancelar")
            ok_btn = Button(text="Borrar todo")
            buttons.add_widget(cancel_btn)
            buttons.add_widget(ok_btn)
            content = BoxLayout(orientation="vertical", spacing=6, padding=6)
            content.add_widget(
                Label(text="Se borraran todas las lecturas. No se puede deshacer.")
            )
            content.add_widget(buttons)
            popup = Popup(title="Borrar todo", content=content, size_hint=(0.6, 0.35))

            def clear(*_: object) -> None:
                popup.dismiss()
                self._notify(self.session.clear_all())
                self._refresh()

            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())
            ok_btn.bind(on_press=clear)
            popup.open()

        def _on_export(self, _: object) -> None:
            out_path = export_path(
                self.session.config.export_dir, prefix="glucosa_horaria_gui"
            )
            try:
                write_readings_xlsx(self.session.readings, out_path, ExcelLayout())
            except OSError as exc:
                self._show_error("exportar", exc)
                return
            if self.status is not None:
                self.status.text = f"Excel generado: {out_path}"

        def _refresh(self) -> None:
            self._refresh_entry()
            self._refresh_stats()
            self._refresh_table()
            self._refresh_chart()

        def _refresh_entry(self) -> None:
            readings = self.session.readings
            selected = self.session.current_hour
            for hour, btn in self.hour_buttons.items():
                btn.background_normal = ""
                btn.background_color = hour_button_color(readings, hour, selected)
            if self.value_label is not None:
                self.value_label.text = f"Glucosa para las {format_hour(selected)}"
            if self.next_label is not None:
                self.next_label.text = next_hour_hint(
                    selected, self.session.auto_advance
                )

        def _refresh_stats(self) -> None:
            if self.stats_label is None:
                return
            self.stats_label.text = stats_panel_text(self.session.statistics())

        def _refresh_table(self) -> None:
            if self.table is None:
                return
            self.table.clear_widgets()
            rows = table_rows(self.session.readings)
            if not rows:
                self.table.add_widget(
                    Label(text="Sin lecturas cargadas.", size_hint_y=None, height=40)
                )
                return
            header = GridLayout(cols=5, size_hint_y=None, height=30)
            for title in ("Hora", "mg/dL", "Estado", "", ""):
                header.add_widget(Label(text=title, bold=True))
            self.table.add_widget(header)
            for hour, value_text, status_text in rows:
                line = GridLayout(cols=5, size_hint_y=None, height=34)
                line.add_widget(Label(text=format_hour(hour)))
                line.add_widget(Label(text=value_text))
                line.add_widget(Label(text=status_text))
                edit_btn = Button(text="Editar")
                edit_btn.bind(on_press=lambda _btn, h=hour: self._open_edit_popup(h))
                delete_btn = Button(text="Borrar")
                delete_btn.bind(on_press=lambda _btn, h=hour: self._on_delete(h))
                line.add_widget(edit_btn)
                line.add_widget(delete_btn)
                self.table.add_widget(line)

        def _refresh_chart(self) -> None:
            if self.chart is None:
                return
            try:
                render_chart(self.session.readings, self.chart_path)
            except OSError as exc:
                self._show_error("graficar", exc)
                return
            self.chart.source = str(self.chart_path)
            self.chart.reload()

        def _notify(self, notification: Notification) -> None:
            if self.status is None:
                return
            self.status.text = f"{notification.title}: {notification.message}"
            self.status.color = (
                STATUS_COLORS[RangeClassification.LOW]
                if notification.is_error
                else DEFAULT_BUTTON_COLOR
            )

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            if self.status is not None:
                self.status.text = f"Error al {action} ({error_type}): {exc}"

    HourlyGlucoseApp().run()
    return 0


def hour_button_color(readings: ReadingSet, hour: int, selected: int) -> RGBA:
    """Background for an hour button: by classification, else selection."""
    value = readings.get(hour)
    if value is not None:
        return STATUS_COLORS[classify(value)]
    if hour == selected:
        return SELECTED_BUTTON_COLOR
    return DEFAULT_BUTTON_COLOR


def next_hour_hint(selected: int, auto_advance: bool) -> str:
    if not auto_advance:
        return ""
    return f"Siguiente: {format_hour(next_hour(selected))}"


def stats_panel_text(stats: SummaryStatistics | None) -> str:
    if stats is None:
        return NO_DATA_TEXT
    return format_statistics(stats)


def table_rows(readings: ReadingSet) -> list[tuple[int, str, str]]:
    """Hour, formatted value and status label for each recorded hour."""
    return [
        (hour, format_mg_dl(value), status_label(classify(value)))
        for hour, value in readings.present()
    ]
