import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

sys.path.insert(0, str(Path(__file__).resolve().parent))

from firmware_tree import (  # noqa: E402
    DEVICE_NAME,
    add_attribute,
    build_sample_device,
    enumeration_files,
    integer_files,
    string_files,
)

from biosctl.core.errors import AttributeWriteError, DeviceStateError, EnumerationError  # noqa: E402
from biosctl.core.models import EnumerationType, IntegerType, StringType  # noqa: E402
from biosctl.firmware.attributes import (  # noqa: E402
    enumerate_attributes,
    find_attribute,
    read_pending_reboot,
    set_attribute_value,
)

CATALOG_LOGGER = "biosctl.firmware.catalog"
ATTRIBUTES_LOGGER = "biosctl.firmware.attributes"


class AttributeTypingTests(unittest.TestCase):
    def test_dispatches_each_known_type(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))

            attributes = {a.name: a for a in enumerate_attributes(device_path, DEVICE_NAME)}

            self.assertEqual({"WakeOnLan", "FanSpeedOffset", "AssetTag"}, set(attributes))
            self.assertEqual(IntegerType(min=0, max=100, step=1), attributes["FanSpeedOffset"].type)
            self.assertEqual(EnumerationType(possible_values=("Enabled", "Disabled")), attributes["WakeOnLan"].type)
            self.assertEqual(StringType(min_length=1, max_length=64), attributes["AssetTag"].type)

    def test_reads_display_fields_and_values(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))

            attribute = find_attribute(enumerate_attributes(device_path), "WakeOnLan")

            self.assertIsNotNone(attribute)
            self.assertEqual("Wake on LAN", attribute.display_name)
            self.assertEqual("en_US.UTF-8", attribute.display_name_language_code)
            self.assertEqual("Enabled", attribute.current_value.value)
            self.assertEqual("Disabled", attribute.default_value.value)
            self.assertEqual(device_path, attribute.device_path)

    def test_possible_values_keep_order_and_empty_fields(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            add_attribute(root, "BootMode", enumeration_files(current="UEFI", possible="UEFI;Legacy;;Auto"))

            (attribute,) = enumerate_attributes(root / DEVICE_NAME)

            self.assertEqual(("UEFI", "Legacy", "", "Auto"), attribute.type.possible_values)

    def test_negative_integer_bounds(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            add_attribute(root, "Offset", integer_files(minimum="-40", maximum="40", step="5"))

            (attribute,) = enumerate_attributes(root / DEVICE_NAME)

            self.assertEqual(IntegerType(min=-40, max=40, step=5), attribute.type)


class PartialFailureTests(unittest.TestCase):
    def test_unknown_type_is_skipped_with_warning(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            build_sample_device(root)
            add_attribute(root, "Mystery", {**string_files(), "type": "bogus\n"})

            with self.assertLogs(CATALOG_LOGGER, level="WARNING") as logs:
                attributes = enumerate_attributes(root / DEVICE_NAME)

            self.assertNotIn("Mystery", [a.name for a in attributes])
            self.assertEqual(3, len(attributes))
            self.assertTrue(any("Mystery" in line and "bogus" in line for line in logs.output))

    def test_missing_display_name_is_skipped(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            build_sample_device(root)
            files = enumeration_files()
            del files["display_name_language_code"]
            add_attribute(root, "NoLanguage", files)

            with self.assertLogs(CATALOG_LOGGER, level="WARNING"):
                names = [a.name for a in enumerate_attributes(root / DEVICE_NAME)]

            self.assertNotIn("NoLanguage", names)
            self.assertIn("WakeOnLan", names)

    def test_string_without_max_length_is_skipped(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            build_sample_device(root)
            files = string_files()
            del files["max_length"]
            add_attribute(root, "SerialTag", files)

            with self.assertLogs(CATALOG_LOGGER, level="WARNING") as logs:
                names = [a.name for a in enumerate_attributes(root / DEVICE_NAME)]

            self.assertNotIn("SerialTag", names)
            self.assertIn("AssetTag", names)
            self.assertTrue(any("SerialTag" in line and "max_length" in line for line in logs.output))

    def test_unparseable_integer_is_skipped_and_causes_logged(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            add_attribute(root, "Broken", integer_files(step="-1"))
            add_attribute(root, "Fine", integer_files())

            with self.assertLogs(CATALOG_LOGGER, level="INFO") as logs:
                names = [a.name for a in enumerate_attributes(root / DEVICE_NAME)]

            self.assertEqual(["Fine"], names)
            self.assertTrue(any("scalar_increment" in line for line in logs.output))

    def test_unreadable_current_value_is_kept_as_failure(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            files = string_files()
            del files["current_value"]
            add_attribute(root, "Password", files)

            (attribute,) = enumerate_attributes(root / DEVICE_NAME)

            self.assertFalse(attribute.current_value.ok)
            self.assertTrue(attribute.default_value.ok)
            self.assertEqual("", attribute.default_value.value)

    def test_stray_file_is_ignored_without_warning(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            device_path = build_sample_device(root)
            (device_path / "attributes" / "README").write_text("not an attribute\n", encoding="utf-8")

            with self.assertNoLogs(CATALOG_LOGGER, level="WARNING"):
                attributes = enumerate_attributes(device_path)

            self.assertEqual(3, len(attributes))

    def test_missing_attributes_directory_is_fatal(self) -> None:
        with TemporaryDirectory() as tmpdir:
            with self.assertRaises(EnumerationError) as ctx:
                enumerate_attributes(Path(tmpdir) / "no-such-device")

            self.assertIsInstance(ctx.exception.__cause__, FileNotFoundError)

    def test_enumeration_is_repeatable(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))

            first = sorted(enumerate_attributes(device_path), key=lambda a: a.name)
            second = sorted(enumerate_attributes(device_path), key=lambda a: a.name)

            self.assertEqual(first, second)


class LookupTests(unittest.TestCase):
    def test_lookup_is_exact(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))
            attributes = enumerate_attributes(device_path)

            self.assertIsNotNone(find_attribute(attributes, "AssetTag"))
            self.assertIsNotNone(find_attribute(attributes, b"AssetTag"))
            self.assertIsNone(find_attribute(attributes, "assettag"))
            self.assertIsNone(find_attribute(attributes, "AssetTag "))


class MutationTests(unittest.TestCase):
    def test_set_value_writes_verbatim_and_rereads(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))
            attribute = find_attribute(enumerate_attributes(device_path), "WakeOnLan")
            target = device_path / "attributes" / "WakeOnLan" / "current_value"

            result = set_attribute_value(attribute, "Disabled\n")

            self.assertEqual(b"Disabled\n", target.read_bytes())
            self.assertEqual("Disabled", result.value)
            self.assertIs(result, attribute.current_value)

    def test_set_value_only_updates_that_instance(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))
            first = find_attribute(enumerate_attributes(device_path), "WakeOnLan")
            second = find_attribute(enumerate_attributes(device_path), "WakeOnLan")

            set_attribute_value(first, "Disabled")

            self.assertEqual("Disabled", first.current_value.value)
            self.assertEqual("Enabled", second.current_value.value)

    def test_write_failure_raises(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))
            attribute = find_attribute(enumerate_attributes(device_path), "AssetTag")
            current = device_path / "attributes" / "AssetTag" / "current_value"
            current.unlink()
            current.mkdir()

            with self.assertRaises(AttributeWriteError) as ctx:
                set_attribute_value(attribute, "LAB-0043")

            self.assertEqual(current, ctx.exception.path)
            self.assertEqual("LAB-0042", attribute.current_value.value)

    def test_failed_read_back_is_kept_as_failure(self) -> None:
        with TemporaryDirectory() as tmpdir:
            device_path = build_sample_device(Path(tmpdir))
            attribute = find_attribute(enumerate_attributes(device_path), "AssetTag")

            with self.assertLogs(ATTRIBUTES_LOGGER, level="WARNING") as logs:
                result = set_attribute_value(attribute, b"\xff", DEVICE_NAME)

            self.assertEqual(b"\xff", (attribute.path / "current_value").read_bytes())
            self.assertFalse(result.ok)
            self.assertFalse(attribute.current_value.ok)
            self.assertEqual("<Access Denied>", attribute.current_value.display())
            self.assertTrue(any("could not be read back" in line for line in logs.output))


class PendingRebootTests(unittest.TestCase):
    def _device(self, tmpdir: str, flag: str | None) -> Path:
        device_path = Path(tmpdir) / DEVICE_NAME
        (device_path / "attributes").mkdir(parents=True)
        if flag is not None:
            (device_path / "attributes" / "pending_reboot").write_text(flag, encoding="utf-8")
        return device_path

    def test_one_means_pending(self) -> None:
        with TemporaryDirectory() as tmpdir:
            self.assertTrue(read_pending_reboot(self._device(tmpdir, "1\n")))

    def test_other_numbers_mean_not_pending(self) -> None:
        for flag in ("0\n", "2\n"):
            with TemporaryDirectory() as tmpdir, self.subTest(flag=flag):
                self.assertFalse(read_pending_reboot(self._device(tmpdir, flag)))

    def test_missing_or_invalid_flag_is_fatal(self) -> None:
        for flag in (None, "yes\n", "256\n"):
            with TemporaryDirectory() as tmpdir, self.subTest(flag=flag):
                with self.assertRaises(DeviceStateError):
                    read_pending_reboot(self._device(tmpdir, flag))


if __name__ == "__main__":
    unittest.main()
