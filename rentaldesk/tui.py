"""Textual TUI for the RentalDesk admin console."""
from __future__ import annotations

import webbrowser
from pathlib import Path

from dotenv import load_dotenv
from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Container, Horizontal, Middle, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Header, Footer, OptionList, Label, Input,
    Button, Switch, Select, DataTable, LoadingIndicator
)
from textual.widgets.option_list import Option

from rentaldesk.console import RentalDesk
from rentaldesk.documents.preview import Preview
from rentaldesk.documents.registry import LocalReferences
from rentaldesk.exceptions import (
    APIError,
    ConfigurationError,
    NetworkError,
    RentalDeskError,
    ValidationError,
)
from rentaldesk.models.attachment import LocalFile
from rentaldesk.schemas import SCHEMAS, EntitySchema, FieldKind, FieldSpec
from rentaldesk.services.entity_panel import EntityPanel
from rentaldesk.services.form_draft import FormDraft
from rentaldesk.utils.dt import format_date_fr

load_dotenv()


def get_user_friendly_error(e: Exception) -> str:
    """Convert exception to user-friendly message."""
    if isinstance(e, NetworkError):
        return "Network error. Please check that the rental server is reachable."
    elif isinstance(e, ValidationError):
        return f"Invalid input: {e}"
    elif isinstance(e, ConfigurationError):
        return f"Configuration error: {e}"
    elif isinstance(e, APIError):
        return f"API error: {e}"
    elif isinstance(e, RentalDeskError):
        return f"Error: {escape(str(e))}"
    elif isinstance(e, FileNotFoundError):
        return f"File not found: {escape(str(e.filename or e))}"
    else:
        return f"Error: {escape(str(e))}"


class TextualNotifier:
    """Reports outcomes as Textual toasts."""

    def __init__(self, app: App) -> None:
        self.app = app

    def success(self, message: str) -> None:
        self.app.notify(escape(message), severity="information")

    def error(self, message: str) -> None:
        self.app.notify(escape(message), severity="error", timeout=8)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question shown over the current screen."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, question: str) -> None:
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        yield Container(
            Label(escape(self.question), id="title"),
            Horizontal(
                Button("Yes", variant="error", id="yes"),
                Button("No", variant="default", id="no"),
                id="buttons",
            ),
            classes="content-card modal-card",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_cancel(self) -> None:
        self.dismiss(False)


class PreviewScreen(ModalScreen[None]):
    """Shows where a document can be viewed, or why it cannot."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
    ]

    def __init__(self, preview: Preview, references: LocalReferences) -> None:
        super().__init__()
        self.preview = preview
        self.references = references

    def compose(self) -> ComposeResult:
        preview = self.preview
        detail = preview.message if not preview.available else f"{preview.kind.value.upper()}: {preview.url}"
        yield Container(
            Label(escape(preview.name), id="title"),
            Label(escape(detail or ""), id="preview-detail"),
            Horizontal(
                Button("Open", variant="primary", id="open", disabled=not preview.available),
                Button("Close", variant="default", id="close"),
                id="buttons",
            ),
            classes="content-card modal-card",
        )

    def _target(self) -> str:
        local_file = self.references.resolve(self.preview.url)
        if local_file is not None:
            return Path(local_file.path).as_uri()
        return self.preview.url

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "open":
            webbrowser.open(self._target())
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class EntityMenuScreen(Screen):
    """Main menu listing the managed entities."""

    BINDINGS = [
        Binding("escape", "quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(
                Label("Select a Section", id="title"),
                OptionList(
                    *[Option(schema.title, id=key) for key, schema in SCHEMAS.items()],
                    Option("Exit", id="exit"),
                    id="entity-list",
                ),
                classes="content-card",
            ),
            id="main-container",
        )
        yield Footer()

    @property
    def desk_app(self) -> RentalDeskApp:
        """Get the app cast to RentalDeskApp type."""
        return self.app  # type: ignore[return-value]

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id == "exit":
            self.desk_app.exit()
        elif event.option.id:
            self.desk_app.push_screen(EntityListScreen(event.option.id))


class EntityListScreen(Screen):
    """Searchable table of one entity, with create, edit and delete actions."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("n", "new", "New"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(self, key: str) -> None:
        super().__init__()
        self.key = key

    @property
    def desk_app(self) -> RentalDeskApp:
        """Get the app cast to RentalDeskApp type."""
        return self.app  # type: ignore[return-value]

    @property
    def panel(self) -> EntityPanel:
        return self.desk_app.desk.panel(self.key)  # type: ignore[union-attr]

    @property
    def schema(self) -> EntitySchema:
        return SCHEMAS[self.key]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(
                Label(self.schema.title, id="title"),
                Input(placeholder="Search...", id="search"),
                LoadingIndicator(id="spinner"),
                DataTable(id="records", cursor_type="row", zebra_stripes=True),
                Container(
                    Label("", id="error-text"),
                    Button("Retry", variant="primary", id="retry"),
                    id="error-state",
                ),
                Horizontal(
                    Button("New", variant="primary", id="new"),
                    Button("Edit", variant="default", id="edit"),
                    Button("Delete", variant="error", id="delete"),
                    id="buttons",
                ),
                classes="content-card wide-card",
            ),
            id="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#records", DataTable)
        table.add_columns(*[self.schema.field(name).label for name in self.schema.columns])
        self.query_one("#error-state").display = False
        self.run_worker(self.load(), exclusive=True)

    def on_screen_resume(self) -> None:
        if self.panel.stale:
            self.run_worker(self.reconcile(), exclusive=True)
        else:
            self.render_rows()

    async def load(self) -> None:
        self.query_one("#spinner", LoadingIndicator).display = True
        if self.schema.reference_fields:
            await self.desk_app.desk.load_reference_labels()  # type: ignore[union-attr]
        await self.panel.load()
        self.query_one("#spinner", LoadingIndicator).display = False
        failed = self.panel.load_error is not None
        self.query_one("#error-state").display = failed
        self.query_one("#records", DataTable).display = not failed
        if failed:
            self.query_one("#error-text", Label).update(
                escape(f"Could not load {self.schema.title.lower()}: {self.panel.load_error}")
            )
        self.render_rows()

    async def reconcile(self) -> None:
        await self.panel.refresh()
        self.render_rows()

    def _cell(self, record, name: str) -> str:
        if self.schema.field(name).kind == FieldKind.DATE:
            return format_date_fr(self.panel.display_value(record, name))
        return self.panel.display_value(record, name)

    def render_rows(self) -> None:
        table = self.query_one("#records", DataTable)
        table.clear()
        search = self.query_one("#search", Input).value
        for record in self.panel.visible(search):
            table.add_row(*[escape(self._cell(record, name)) for name in self.schema.columns], key=record.id)

    def _current_id(self) -> str | None:
        table = self.query_one("#records", DataTable)
        if not table.row_count:
            return None
        return table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self.render_rows()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value:
            self.open_form(event.row_key.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "new":
            self.action_new()
        elif event.button.id == "edit":
            self.action_edit()
        elif event.button.id == "delete":
            self.action_delete()
        elif event.button.id == "retry":
            self.action_reload()

    def open_form(self, record_id: str | None) -> None:
        if record_id is None:
            self.panel.open_create()
        else:
            self.panel.open_edit(record_id)
        self.desk_app.push_screen(EntityFormScreen(self.key))

    def action_new(self) -> None:
        self.open_form(None)

    def action_edit(self) -> None:
        record_id = self._current_id()
        if record_id:
            self.open_form(record_id)

    def action_delete(self) -> None:
        record_id = self._current_id()
        if not record_id:
            return
        record = self.panel.select(record_id)

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self.delete(record_id), exclusive=True)

        self.desk_app.push_screen(ConfirmScreen(f"Delete {record.label}?"), on_confirm)

    async def delete(self, record_id: str) -> None:
        await self.panel.delete(record_id)
        self.render_rows()

    def action_reload(self) -> None:
        self.run_worker(self.load(), exclusive=True)

    def action_go_back(self) -> None:
        self.desk_app.pop_screen()


class EntityFormScreen(Screen):
    """Create or edit form generated from an entity schema."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+s", "save", "Save"),
    ]

    def __init__(self, key: str) -> None:
        super().__init__()
        self.key = key

    @property
    def desk_app(self) -> RentalDeskApp:
        """Get the app cast to RentalDeskApp type."""
        return self.app  # type: ignore[return-value]

    @property
    def panel(self) -> EntityPanel:
        return self.desk_app.desk.panel(self.key)  # type: ignore[union-attr]

    @property
    def draft(self) -> FormDraft:
        return self.panel.draft  # type: ignore[return-value]

    def _field_widget(self, field_spec: FieldSpec):
        value = self.draft.get(field_spec.name)
        widget_id = f"field-{field_spec.name}"
        if field_spec.kind == FieldKind.BOOL:
            return Switch(value=value == "true", id=widget_id, disabled=field_spec.read_only)
        if field_spec.kind == FieldKind.REFERENCE or field_spec.choices:
            if field_spec.kind == FieldKind.REFERENCE:
                options = self.desk_app.desk.reference_options(field_spec.reference or "")  # type: ignore[union-attr]
            else:
                options = [(choice, choice) for choice in field_spec.choices]
            selected = {"value": value} if value in [option[1] for option in options] else {}
            return Select(options, id=widget_id, disabled=field_spec.read_only, **selected)
        placeholder = "YYYY-MM-DD" if field_spec.kind == FieldKind.DATE else ""
        return Input(value=value, placeholder=placeholder, id=widget_id, disabled=field_spec.read_only)

    def compose(self) -> ComposeResult:
        schema = self.panel.schema
        title = f"New {schema.title.lower()}" if self.draft.is_new else f"Edit {escape(self.draft.record.label)}"
        fields = []
        for field_spec in schema.fields:
            fields.append(Label(f"{field_spec.label}{' *' if field_spec.required else ''}", classes="field-label"))
            fields.append(self._field_widget(field_spec))
            fields.append(Label("", id=f"error-{field_spec.name}", classes="field-error"))
        yield Header()
        yield Container(
            Container(
                Label(title, id="title"),
                VerticalScroll(
                    *fields,
                    Label("Documents", classes="section-title"),
                    OptionList(id="doc-list"),
                    Input(placeholder="Path of a file to attach...", id="doc-path"),
                    Horizontal(
                        Button("Attach", variant="default", id="attach"),
                        Button("Remove", variant="default", id="remove-doc"),
                        Button("Preview", variant="default", id="preview-doc"),
                        id="doc-buttons",
                    ),
                    id="form-fields",
                ),
                Horizontal(
                    Button("Save", variant="primary", id="save"),
                    Button("Cancel", variant="default", id="cancel"),
                    id="buttons",
                ),
                classes="content-card wide-card",
            ),
            id="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        uploader = self.draft.uploader
        read_only = uploader is None or uploader.read_only
        for widget_id in ("#doc-path", "#attach", "#remove-doc"):
            self.query_one(widget_id).display = not read_only
        self.render_documents()

    def render_errors(self) -> None:
        for field_spec in self.panel.schema.fields:
            message = self.draft.errors.get(field_spec.name, "")
            self.query_one(f"#error-{field_spec.name}", Label).update(escape(message))

    def render_derived(self) -> None:
        for rule in self.panel.schema.derived:
            widget = self.query_one(f"#field-{rule.target}", Input)
            value = self.draft.get(rule.target)
            if widget.value != value:
                widget.value = value

    def render_documents(self) -> None:
        option_list = self.query_one("#doc-list", OptionList)
        option_list.clear_options()
        uploader = self.draft.uploader
        items = uploader.items() if uploader else []
        for index, attachment in enumerate(items):
            suffix = " (new)" if attachment.is_new else ""
            option_list.add_option(Option(escape(f"{attachment.name}{suffix}"), id=str(index)))
        if not items:
            option_list.add_option(Option("No documents", id="none", disabled=True))

    def _update(self, name: str, value: str) -> None:
        field_spec = self.panel.schema.field(name)
        if field_spec.read_only or self.draft.get(name) == value:
            return
        self.draft.set(name, value)
        self.render_derived()
        self.render_errors()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id and event.input.id.startswith("field-"):
            self._update(event.input.id.removeprefix("field-"), event.value)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id and event.select.id.startswith("field-"):
            value = event.value if isinstance(event.value, str) else ""
            self._update(event.select.id.removeprefix("field-"), value)

    def on_switch_changed(self, event: Switch.Changed) -> None:
        if event.switch.id and event.switch.id.startswith("field-"):
            self._update(event.switch.id.removeprefix("field-"), "true" if event.value else "false")

    def _highlighted_attachment(self):
        uploader = self.draft.uploader
        index = self.query_one("#doc-list", OptionList).highlighted
        items = uploader.items() if uploader else []
        if index is None or index >= len(items):
            return None
        return items[index]

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            self.action_save()
        elif event.button.id == "cancel":
            self.action_cancel()
        elif event.button.id == "attach":
            self.attach()
        elif event.button.id == "remove-doc":
            attachment = self._highlighted_attachment()
            if attachment is not None:
                self.run_worker(self.remove_document(attachment), exclusive=True)
        elif event.button.id == "preview-doc":
            attachment = self._highlighted_attachment()
            if attachment is not None and self.draft.uploader:
                self.desk_app.push_screen(
                    PreviewScreen(self.draft.uploader.preview(attachment), self.draft.uploader.references)
                )

    def attach(self) -> None:
        path_input = self.query_one("#doc-path", Input)
        if not path_input.value.strip() or not self.draft.uploader:
            return
        try:
            self.draft.uploader.add([LocalFile.from_path(path_input.value.strip())])
        except (FileNotFoundError, ValidationError) as e:
            self.desk_app.notify(get_user_friendly_error(e), severity="error")
            return
        path_input.value = ""
        self.render_documents()

    async def remove_document(self, attachment) -> None:
        await self.draft.uploader.remove(attachment)  # type: ignore[union-attr]
        self.render_documents()

    def action_save(self) -> None:
        self.run_worker(self.save(), exclusive=True)

    async def save(self) -> None:
        try:
            record = await self.panel.submit()
        except RentalDeskError as e:
            self.desk_app.notify(get_user_friendly_error(e), severity="error")
            return
        if record is None:
            self.render_errors()
            return
        self.desk_app.pop_screen()

    def action_cancel(self) -> None:
        self.panel.close()
        self.desk_app.pop_screen()


class RentalDeskApp(App):
    """Main Textual app for RentalDesk."""

    CSS = """
    /* ===========================================
       RentalDesk TUI - Stylesheet
       =========================================== */

    /* --- Layout --- */
    #main-container {
        width: 100%;
        height: 1fr;
        align: center middle;
        padding: 1 2;
    }

    .content-card {
        width: 80%;
        min-width: 60;
        max-width: 120;
        height: auto;
        padding: 2 3;
        border: round $primary;
        background: $surface;
    }

    .wide-card {
        width: 95%;
        max-width: 160;
        height: 1fr;
    }

    ModalScreen {
        align: center middle;
    }

    .modal-card {
        width: 60;
    }

    /* --- Typography --- */
    #title {
        text-style: bold;
        text-align: center;
        margin-bottom: 1;
        width: 100%;
    }

    .section-title {
        text-style: bold;
        margin-top: 1;
    }

    .field-label {
        color: $text-muted;
    }

    .field-error {
        color: $error;
        height: auto;
    }

    #preview-detail {
        color: $text-muted;
        margin-bottom: 1;
        width: 100%;
    }

    /* --- Loading Screen --- */
    .loading-card {
        width: auto;
        min-width: 40;
        height: auto;
        padding: 3 5;
        border: round $primary;
        background: $surface;
        align: center middle;
    }

    #loading-text {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
        width: 100%;
    }

    LoadingIndicator {
        width: 100%;
        height: 3;
        color: $primary;
    }

    /* --- Lists and Tables --- */
    OptionList {
        border: round $border;
        background: $surface;
        padding: 1;
        height: auto;
        min-height: 5;
        max-height: 20;
        margin-bottom: 1;
        width: 100%;
    }

    OptionList:focus {
        border: round $primary;
    }

    DataTable {
        height: 1fr;
        border: round $border;
    }

    DataTable:focus {
        border: round $primary;
    }

    #error-state {
        height: auto;
        border: round $error;
        background: $error 20%;
        padding: 1 2;
    }

    /* --- Form Elements --- */
    #form-fields {
        height: 1fr;
    }

    Input {
        border: round $border;
        width: 100%;
    }

    Input:focus {
        border: round $primary;
    }

    Select {
        width: 100%;
    }

    #search {
        margin-bottom: 1;
    }

    /* --- Buttons --- */
    #buttons, #doc-buttons {
        width: 100%;
        height: auto;
        align: center middle;
        margin-top: 1;
    }

    #buttons Button, #doc-buttons Button {
        margin: 0 1;
        min-width: 16;
    }

    /* --- Header --- */
    Header {
        background: $primary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.desk: RentalDesk | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Center(
            Middle(
                Container(
                    LoadingIndicator(id="spinner"),
                    Label("Connecting to the rental server...", id="loading-text"),
                    classes="loading-card",
                )
            ),
            id="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = "RentalDesk"
        self.run_worker(self.initialize(), exclusive=True)

    async def initialize(self) -> None:
        try:
            self.desk = RentalDesk(notifier=TextualNotifier(self))
            await self.desk.load_reference_labels()
            self.push_screen(EntityMenuScreen())
        except Exception as e:
            loading_text = self.query_one("#loading-text", Label)
            loading_text.update(get_user_friendly_error(e))
            # Hide spinner on error
            spinner = self.query_one("#spinner", LoadingIndicator)
            spinner.display = False

    async def on_unmount(self) -> None:
        if self.desk:
            await self.desk.close()


def main() -> None:
    app = RentalDeskApp()
    app.run()


if __name__ == "__main__":
    main()
