"""Tests for vault document utility functions."""

from medvault.core.modules.document.utils import normalize_file_type, sanitize_filename


class TestSanitizeFilename:
    """Tests for sanitize_filename function."""

    def test_normal_filename_unchanged(self):
        assert sanitize_filename("ecg.pdf") == "ecg.pdf"
        assert sanitize_filename("mri_scan_2024.png") == "mri_scan_2024.png"

    def test_filename_with_spaces(self):
        assert sanitize_filename("blood test results.pdf") == "blood test results.pdf"

    def test_path_traversal_attack_unix(self):
        assert sanitize_filename("../../../etc/passwd") == "passwd"
        assert sanitize_filename("../report.pdf") == "report.pdf"

    def test_path_traversal_attack_windows(self):
        assert sanitize_filename("..\\..\\boot.ini") == "boot.ini"

    def test_hidden_files_leading_dots_removed(self):
        assert sanitize_filename(".hidden") == "hidden"
        assert sanitize_filename("...prescription.txt") == "prescription.txt"

    def test_dangerous_characters_replaced(self):
        assert sanitize_filename("file:name.txt") == "file_name.txt"
        assert sanitize_filename("file|name.txt") == "file_name.txt"
        assert sanitize_filename('scan"<>.doc') == "scan_.doc"

    def test_long_filename_preserves_extension(self):
        result = sanitize_filename("neurology_letter_" * 10 + ".pdf")
        assert len(result) <= 100
        assert result.endswith(".pdf")
        assert result.startswith("neurology_letter")

    def test_long_filename_without_extension(self):
        assert sanitize_filename("x" * 150) == "x" * 100

    def test_meaningless_names_replaced(self):
        assert sanitize_filename("") == "unnamed_document"
        assert sanitize_filename("...") == "unnamed_document"
        assert sanitize_filename("___") == "unnamed_document"


class TestNormalizeFileType:
    def test_missing_type_falls_back_to_octet_stream(self):
        assert normalize_file_type(None) == "application/octet-stream"
        assert normalize_file_type("") == "application/octet-stream"

    def test_parameters_and_case_dropped(self):
        assert normalize_file_type("Application/PDF") == "application/pdf"
        assert normalize_file_type("text/plain; charset=utf-8") == "text/plain"

    def test_malformed_type_falls_back(self):
        assert normalize_file_type("pdf") == "application/octet-stream"
        assert normalize_file_type("text/<script>") == "application/octet-stream"
