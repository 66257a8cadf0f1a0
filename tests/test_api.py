"""
Tests for the PDF signing HTTP endpoints.

Tests cover:
- Health check
- Batch application (attachment response, error positions, validation)
- Single signature form route
- Upload / document record flow
- Signed page preview
"""

import json
from io import BytesIO

from pypdf import PdfReader


def _pdf_file(pdf_bytes, name="contract.pdf"):
    return {"file": (name, pdf_bytes, "application/pdf")}


def _text_signature(text="Jane Doe", page_number=1, **extra):
    signature = {
        "type": "text",
        "data": text,
        "x": 100,
        "y": 700,
        "pageNumber": page_number,
        "font": "Helvetica",
        "fontSize": 24,
        "color": "#000000",
    }
    signature.update(extra)
    return signature


class TestHealthCheck:
    def test_health_check_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestApplySignatures:
    """Tests for POST /pdf/sign/apply."""

    def test_returns_signed_pdf_attachment(self, client, blank_pdf, png_data_url):
        signatures = [
            _text_signature(),
            {"type": "image", "data": png_data_url, "x": 50, "y": 50, "pageNumber": 1},
        ]
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps(signatures)},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"].startswith("attachment")
        assert "signed_document.pdf" in response.headers["content-disposition"]

        reader = PdfReader(BytesIO(response.content))
        assert len(reader.pages) == 1
        assert "Jane Doe" in reader.pages[0].extract_text()

    def test_failing_signature_position_is_reported(self, client, blank_pdf):
        signatures = [_text_signature(), _text_signature("Nope", page_number=5), _text_signature("Later")]
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps(signatures)},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "SignatureApplicationError"
        assert body["position"] == 2
        assert body["cause"]["kind"] == "PageOutOfBounds"
        assert body["cause"]["page_number"] == 5
        assert body["cause"]["page_count"] == 1

    def test_unsupported_image_is_bad_request(self, client, blank_pdf, gif_data_url):
        signatures = [{"type": "image", "data": gif_data_url, "x": 1, "y": 1, "pageNumber": 1}]
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps(signatures)},
        )
        assert response.status_code == 400
        assert response.json()["cause"]["kind"] == "UnsupportedImageFormat"

    def test_unencodable_text_is_bad_request(self, client, blank_pdf):
        signatures = [_text_signature(), _text_signature("Ωμέγα توقيع")]
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps(signatures)},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["position"] == 2
        assert body["cause"]["kind"] == "UnencodableText"
        assert body["cause"]["font"] == "Helvetica"

    def test_empty_list(self, client, blank_pdf):
        response = client.post("/pdf/sign/apply", files=_pdf_file(blank_pdf), data={"signatures": "[]"})
        assert response.status_code == 400
        assert response.json()["kind"] == "NoSignaturesProvided"

    def test_invalid_json(self, client, blank_pdf):
        response = client.post("/pdf/sign/apply", files=_pdf_file(blank_pdf), data={"signatures": "{oops"})
        assert response.status_code == 400

    def test_non_numeric_field_is_rejected(self, client, blank_pdf):
        signatures = [_text_signature(x="left")]
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps(signatures)},
        )
        assert response.status_code == 400

    def test_malformed_document_is_server_error(self, client):
        response = client.post(
            "/pdf/sign/apply",
            files=_pdf_file(b"this is not a pdf"),
            data={"signatures": json.dumps([_text_signature()])},
        )
        assert response.status_code == 500
        assert response.json()["cause"]["kind"] == "MalformedDocument"

    def test_missing_file(self, client):
        response = client.post("/pdf/sign/apply", data={"signatures": json.dumps([_text_signature()])})
        assert response.status_code == 400

    def test_non_pdf_upload(self, client):
        response = client.post(
            "/pdf/sign/apply",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"signatures": json.dumps([_text_signature()])},
        )
        assert response.status_code == 400


class TestSignSingle:
    """Tests for POST /pdf/sign/single."""

    def _form(self, **overrides):
        form = {
            "signature_type": "text",
            "signature_data": "Jane Doe",
            "x": "100",
            "y": "700",
            "page_number": "1",
            "font": "Times-Roman",
            "font_size": "18",
            "color": "#202020",
        }
        form.update(overrides)
        return form

    def test_text_signature(self, client, blank_pdf):
        response = client.post("/pdf/sign/single", files=_pdf_file(blank_pdf), data=self._form())
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "Jane Doe" in PdfReader(BytesIO(response.content)).pages[0].extract_text()

    def test_image_signature(self, client, blank_pdf, jpeg_data_url):
        form = self._form(signature_type="image", signature_data=jpeg_data_url)
        response = client.post("/pdf/sign/single", files=_pdf_file(blank_pdf), data=form)
        assert response.status_code == 200

    def test_non_numeric_coordinate(self, client, blank_pdf):
        response = client.post("/pdf/sign/single", files=_pdf_file(blank_pdf), data=self._form(x="abc"))
        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "InvalidNumericField"
        assert body["field"] == "x"

    def test_fractional_page_number(self, client, blank_pdf):
        response = client.post("/pdf/sign/single", files=_pdf_file(blank_pdf), data=self._form(page_number="1.5"))
        assert response.status_code == 400
        assert response.json()["field"] == "pageNumber"

    def test_unknown_type_is_rejected(self, client, blank_pdf):
        response = client.post(
            "/pdf/sign/single", files=_pdf_file(blank_pdf), data=self._form(signature_type="hologram")
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "UnknownSignatureType"

    def test_bad_color(self, client, blank_pdf):
        response = client.post("/pdf/sign/single", files=_pdf_file(blank_pdf), data=self._form(color="black"))
        assert response.status_code == 400
        assert response.json()["cause"]["kind"] == "InvalidColorFormat"


class TestDocumentFlow:
    """Upload, sign by document id, then read the record back."""

    def test_upload_sign_and_fetch(self, client, three_page_pdf):
        upload = client.post("/pdf/sign/upload", files=_pdf_file(three_page_pdf, "lease.pdf"))
        assert upload.status_code == 200
        document = upload.json()["document"]
        assert document["page_count"] == 3
        assert document["signed"] is False
        assert document["preview"].startswith("data:image/png;base64,")

        signatures = [_text_signature(page_number=3), {"type": "unknown", "data": "", "x": 0, "y": 0, "pageNumber": 1}]
        signed = client.post(
            "/pdf/sign/apply",
            data={"signatures": json.dumps(signatures), "document_id": document["document_id"]},
        )
        assert signed.status_code == 200
        download_url = signed.headers["x-download-url"]
        assert download_url.startswith("/downloads/")
        assert client.get(download_url).status_code == 200

        record = client.get(f"/pdf/sign/documents/{document['document_id']}").json()["document"]
        assert record["signed"] is True
        assert len(record["signatures"]) == 1
        assert record["signatures"][0]["pageNumber"] == 3
        assert "appliedAt" in record["signatures"][0]

        listing = client.get("/pdf/sign/documents/").json()["documents"]
        assert any(item["document_id"] == document["document_id"] for item in listing)

    def test_signing_twice_accumulates_in_file_and_record(self, client, blank_pdf):
        upload = client.post("/pdf/sign/upload", files=_pdf_file(blank_pdf, "lease.pdf"))
        document_id = upload.json()["document"]["document_id"]

        urls = []
        for text in ("Alpha", "Beta"):
            response = client.post(
                "/pdf/sign/apply",
                data={"signatures": json.dumps([_text_signature(text)]), "document_id": document_id},
            )
            assert response.status_code == 200
            urls.append(response.headers["x-download-url"])

        assert all(url.startswith("/downloads/lease_signed") for url in urls)
        assert urls[0] != urls[1]

        record = client.get(f"/pdf/sign/documents/{document_id}").json()["document"]
        assert len(record["signatures"]) == 2

        latest = client.get(urls[1])
        text = PdfReader(BytesIO(latest.content)).pages[0].extract_text()
        assert "Alpha" in text
        assert "Beta" in text

    def test_unknown_document(self, client):
        response = client.get("/pdf/sign/documents/does-not-exist")
        assert response.status_code == 404

    def test_delete_document(self, client, blank_pdf):
        document_id = client.post("/pdf/sign/upload", files=_pdf_file(blank_pdf)).json()["document"]["document_id"]
        assert client.delete(f"/pdf/sign/documents/{document_id}").status_code == 200
        assert client.get(f"/pdf/sign/documents/{document_id}").status_code == 404

    def test_upload_rejects_broken_pdf(self, client):
        response = client.post("/pdf/sign/upload", files=_pdf_file(b"%PDF-1.4 broken"))
        assert response.status_code == 500
        assert response.json()["kind"] == "MalformedDocument"


class TestPreview:
    def test_preview_of_signed_page(self, client, blank_pdf):
        response = client.post(
            "/pdf/sign/preview",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps([_text_signature()]), "preview_page": "1"},
        )
        assert response.status_code == 200
        assert response.json()["preview"].startswith("data:image/png;base64,")

    def test_preview_page_out_of_range(self, client, blank_pdf):
        response = client.post(
            "/pdf/sign/preview",
            files=_pdf_file(blank_pdf),
            data={"signatures": json.dumps([_text_signature()]), "preview_page": "4"},
        )
        assert response.status_code == 400
