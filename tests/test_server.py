import asyncio

import pytest

from config.settings import ServerSettings, Settings
from printserver.printing.manager import PrintManager
from printserver.server import PrintServer

from conftest import png_bytes

BROKEN_URL = "http://127.0.0.1:1/logo.png"


def raster_height(job: bytes) -> int:
    # ESC @ (2) + GS v 0 m (4) + xL xH (2) + yL yH
    return job[8] | (job[9] << 8)


@pytest.fixture
def make_client(aiohttp_client, fonts):
    async def factory(settings):
        server = PrintServer(settings, PrintManager(settings, fonts=fonts))
        client = await aiohttp_client(server.app)
        return client, server.manager
    return factory


@pytest.fixture
async def client(make_client, settings):
    return await make_client(settings)


def payload(receipt_json, **details):
    return {
        "printerDetails": details or {"type": "network", "ipAddress": "10.0.0.5"},
        "receiptData": receipt_json,
    }


async def test_health(client):
    http, _ = client
    resp = await http.get("/")

    assert resp.status == 200
    assert await resp.json() == {"message": "Server running successfully!"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


async def test_preflight(client):
    http, _ = client
    resp = await http.options("/print-server")

    assert resp.status == 200
    assert resp.headers["Access-Control-Allow-Methods"] == "GET,POST,OPTIONS"
    assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type"


async def test_print_minimal_receipt(client, receipt_json):
    http, manager = client
    body = payload(receipt_json)
    resp = await http.post("/print-server", json=body)

    assert resp.status == 200
    assert await resp.json() == {"message": "Print successful!", "data": body}

    job = manager.mock_printer.last_job
    assert raster_height(job) == 700
    assert job.endswith(b"\x1dV\x00")


async def test_change_amount_grows_receipt(client, receipt_json):
    http, manager = client
    receipt_json["changeAmount"] = "5.00"
    resp = await http.post("/print-server", json=payload(receipt_json))

    assert (await resp.json())["message"] == "Print successful!"
    assert raster_height(manager.mock_printer.last_job) == 740


async def test_unknown_printer_type(client, receipt_json):
    http, manager = client
    resp = await http.post("/print-server", json=payload(receipt_json, type="usb"))

    assert resp.status == 200
    assert await resp.json() == {"message": "printer type not defined!", "data": {"type": "usb"}}
    assert manager.mock_printer.last_job is None


async def test_broken_logo_still_prints(client, receipt_json):
    http, manager = client
    receipt_json["logo"] = BROKEN_URL
    receipt_json["qrCode"] = "data:image/png;base64,not-an-image"
    resp = await http.post("/print-server", json=payload(receipt_json))

    assert (await resp.json())["message"] == "Print successful!"
    assert raster_height(manager.mock_printer.last_job) == 700


async def test_images_included(client, receipt_json, tmp_path):
    http, manager = client
    logo = tmp_path / "logo.png"
    logo.write_bytes(png_bytes((300, 100)))
    receipt_json["logo"] = str(logo)
    resp = await http.post("/print-server", json=payload(receipt_json))

    assert (await resp.json())["message"] == "Print successful!"
    assert raster_height(manager.mock_printer.last_job) == 1300 - 250


async def test_invalid_receipt_reports_failure(client):
    http, manager = client
    resp = await http.post("/print-server", json={
        "printerDetails": {"type": "windows", "deviceName": "POS-80"},
        "receiptData": "oops",
    })

    assert resp.status == 200
    body = await resp.json()
    assert body["message"] == "Print failed!"
    assert "receiptData" in body["error"]
    assert manager.mock_printer.last_job is None


async def test_invalid_json(client):
    http, _ = client
    resp = await http.post("/print-server", data="{not json", headers={"Content-Type": "application/json"})
    assert resp.status == 400


async def test_strict_status_codes(make_client, receipt_json):
    settings = Settings(env="simulator", server=ServerSettings(strict_status_codes=True), _env_file=None)
    http, _ = await make_client(settings)

    resp = await http.post("/print-server", json=payload(receipt_json, type="usb"))
    assert resp.status == 400

    resp = await http.post("/print-server", json={"printerDetails": {"type": "network", "ipAddress": "10.0.0.5"}})
    assert resp.status == 500

    resp = await http.post("/print-server", json=payload(receipt_json))
    assert resp.status == 200


async def test_network_printer_end_to_end(make_client, receipt_json):
    received = bytearray()
    done = asyncio.Event()

    async def handle(reader, writer):
        received.extend(await reader.read())
        writer.close()
        done.set()

    listener = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = listener.sockets[0].getsockname()[1]
    try:
        http, _ = await make_client(Settings(env="hardware", _env_file=None))
        resp = await http.post("/print-server", json=payload(
            receipt_json, type="network", ipAddress="127.0.0.1", port=port,
        ))

        assert (await resp.json())["message"] == "Print successful!"
        await asyncio.wait_for(done.wait(), timeout=5.0)
        assert raster_height(bytes(received)) == 700
    finally:
        listener.close()
        await listener.wait_closed()


async def test_network_printer_offline(make_client, receipt_json):
    http, _ = await make_client(Settings(env="hardware", _env_file=None))
    resp = await http.post("/print-server", json=payload(
        receipt_json, type="network", ipAddress="127.0.0.1", port=1,
    ))

    body = await resp.json()
    assert resp.status == 200
    assert body["message"] == "Print failed!"
    assert "127.0.0.1:1" in body["error"]


async def test_simulator_keeps_only_latest_job(client, receipt_json):
    http, manager = client
    for _ in range(4):
        await http.post("/print-server", json=payload(receipt_json))
    receipt_json["changeAmount"] = "5.00"
    await http.post("/print-server", json=payload(receipt_json))

    assert len(manager.mock_printer.jobs) == 1
    assert raster_height(manager.mock_printer.last_job) == 740
