from printserver.printing.models import (
    PrinterType,
    ReceiptData,
    resolve_printer_target,
)


def test_receipt_from_dict(receipt_json, item_json):
    receipt_json["items"] = [item_json]
    receipt_json["customer"] = {"name": "Ahmed", "vatNo": "311"}
    receipt_json["bankDetails"] = ["IBAN SA00 0000", "Al Rajhi Bank"]

    data = ReceiptData.from_dict(receipt_json)

    assert data.company_name == "Al Noor Trading"
    assert data.customer.name == "Ahmed"
    assert data.customer.vat_no == "311"
    assert data.customer.phone == ""
    assert data.items[0].name_arabic == "تمر ١ كجم"
    assert data.items[0].qty == "2"
    assert data.bank_details == ("IBAN SA00 0000", "Al Rajhi Bank")
    assert data.has_customer


def test_lenient_parsing():
    data = ReceiptData.from_dict({
        "items": "not a list",
        "bankDetails": None,
        "customer": None,
        "grandTotal": 115.5,
        "changeAmount": None,
    })

    assert data.items == ()
    assert data.bank_details == ()
    assert data.customer.name == ""
    assert data.grand_total == "115.5"
    assert data.company_name == ""
    assert not data.has_change


def test_zero_change_is_present():
    assert ReceiptData.from_dict({"changeAmount": "0"}).has_change
    assert ReceiptData.from_dict({"changeAmount": 0}).has_change
    assert not ReceiptData.from_dict({"changeAmount": ""}).has_change


def test_network_target_default_port():
    target = resolve_printer_target({"type": "network", "ipAddress": "10.0.0.5"})

    assert target.type is PrinterType.NETWORK
    assert target.host == "10.0.0.5"
    assert target.port == 9600
    assert target.interface == "tcp://10.0.0.5:9600"


def test_network_target_explicit_port():
    target = resolve_printer_target({"type": "network", "ipAddress": "10.0.0.5", "port": "9100"})
    assert target.port == 9100


def test_network_target_configured_default():
    target = resolve_printer_target({"type": "network", "ipAddress": "10.0.0.5"}, default_port=9100)
    assert target.port == 9100


def test_spooler_target():
    target = resolve_printer_target({"type": "windows", "deviceName": "EPSON TM-T20"})

    assert target.type is PrinterType.SPOOLER
    assert target.interface == "//localhost/EPSON TM-T20"


def test_unrecognized_targets():
    assert resolve_printer_target({"type": "usb"}) is None
    assert resolve_printer_target({"type": "windows", "deviceName": ""}) is None
    assert resolve_printer_target({"type": "network", "ipAddress": ""}) is None
    assert resolve_printer_target({"type": "network", "ipAddress": "10.0.0.5", "port": "abc"}) is None
    assert resolve_printer_target(None) is None
