"""Tests for Pydantic models."""
import pytest

from rentaldesk.models.attachment import Attachment, LocalFile, Origin
from rentaldesk.models.charge import Charge
from rentaldesk.models.customer import Customer
from rentaldesk.models.document import DEFAULT_MIME_TYPE, Document, file_name_from_path, mime_type_for
from rentaldesk.models.inspection import VehicleInspection
from rentaldesk.models.traite import Traite
from rentaldesk.models.vehicle import Vehicle


class TestDocument:
    """Tests for the Document model and path helpers."""

    def test_file_name_from_windows_path(self):
        """Backslash paths should be split like slash paths."""
        assert file_name_from_path('C:\\uploads\\car\\x-report.pdf') == 'x-report.pdf'

    def test_file_name_from_posix_path(self):
        assert file_name_from_path('/srv/uploads/a.png') == 'a.png'

    def test_mime_type_from_extension_is_case_insensitive(self):
        assert mime_type_for('PHOTO.JPG') == 'image/jpeg'

    def test_unknown_extension_uses_default_mime_type(self):
        assert mime_type_for('notes.rentaldesk-unknown') == DEFAULT_MIME_TYPE
        assert mime_type_for('') == DEFAULT_MIME_TYPE

    def test_other_extensions_are_guessed(self):
        """Extensions outside the preview table fall back to the system MIME registry."""
        assert mime_type_for('notes.TXT') == 'text/plain'
        assert mime_type_for('export.csv') == 'text/csv'

    def test_coerce_bare_path(self):
        """A bare storage path should become a document with derived name and type."""
        document = Document.coerce('/srv/uploads/1714-recu.jpg')

        assert document.name == '1714-recu.jpg'
        assert document.type == 'image/jpeg'
        assert document.size == 0
        assert document.url == '/srv/uploads/1714-recu.jpg'

    def test_coerce_fills_missing_name_and_type(self):
        document = Document.coerce({'url': 'uploads/scan.pdf'})

        assert document.name == 'scan.pdf'
        assert document.type == 'application/pdf'


class TestAttachment:
    """Tests for the Attachment model."""

    def test_from_document_is_existing(self, sample_document_data):
        attachment = Attachment.from_document(Document(**sample_document_data))

        assert attachment.origin == Origin.EXISTING
        assert not attachment.is_new
        assert attachment.location == sample_document_data['url']
        assert attachment.size_bytes == 20480

    def test_from_local_file_is_new(self):
        local_file = LocalFile(path='/tmp/a.png', name='a.png', mime_type='image/png', size=10)
        attachment = Attachment.from_local_file(local_file, 'blob:rentaldesk/abc')

        assert attachment.is_new
        assert attachment.location == 'blob:rentaldesk/abc'
        assert attachment.local_file == local_file

    def test_local_file_from_path(self, tmp_path):
        path = tmp_path / 'permis.pdf'
        path.write_bytes(b'%PDF-1.4')

        local_file = LocalFile.from_path(str(path))

        assert local_file.name == 'permis.pdf'
        assert local_file.mime_type == 'application/pdf'
        assert local_file.size == 8

    def test_local_file_from_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalFile.from_path(str(tmp_path / 'missing.pdf'))

    def test_local_files_compare_by_value(self):
        first = LocalFile(path='/tmp/a.png', name='a.png')
        second = LocalFile(path='/tmp/a.png', name='a.png')

        assert first == second
        assert hash(first) == hash(second)


class TestRecords:
    """Tests for the entity models."""

    def test_customer_from_api(self, sample_customer_data):
        customer = Customer(**sample_customer_data)

        assert customer.id == 'cust-1'
        assert customer.nom_fr == 'Alaoui'
        assert customer.age == '34'
        assert customer.full_name == 'Karim Alaoui'
        assert len(customer.documents) == 1
        assert customer.documents[0].name == 'carte-grise.pdf'

    def test_record_accepts_plain_id(self, sample_inspection_data):
        inspection = VehicleInspection(**sample_inspection_data)

        assert inspection.id == 'insp-1'
        assert inspection.vehicle == 'veh-1'
        assert inspection.documents[0].url == 'uploads/vehicleinspections/pv.pdf'

    def test_attachments_become_documents(self, sample_charge_data):
        """Charges store bare paths under attachments."""
        charge = Charge(**sample_charge_data)

        assert [doc.name for doc in charge.documents] == ['1714-quittance.pdf', '1714-recu.jpg']
        assert charge.documents[1].type == 'image/jpeg'

    def test_populated_vehicle_collapses_to_id(self, sample_traite_data):
        traite = Traite(**sample_traite_data)

        assert traite.vehicle == 'veh-1'
        assert traite.label == 'Mars 2024'

    def test_vehicle_label(self, sample_vehicle_data):
        vehicle = Vehicle(**sample_vehicle_data)

        assert vehicle.label == '12345-A-6 - Logan'

    def test_wire_values_use_api_names(self, sample_vehicle_data):
        values = Vehicle(**sample_vehicle_data).wire_values()

        assert values['licensePlate'] == '12345-A-6'
        assert values['rentalPrice'] == 250
        assert 'license_plate' not in values

    def test_unknown_fields_are_ignored(self, sample_vehicle_data):
        vehicle = Vehicle(**{**sample_vehicle_data, '__v': 0, 'somethingNew': 'x'})

        assert vehicle.id == 'veh-1'
