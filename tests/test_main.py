from pdf_reflow.errors import ExtractionFailed, FileError, ValidationError
from pdf_reflow.main import (
    config_from_args,
    parse_args,
    pdf_file_to_markdown_file,
    process_pdfs,
)
from pdf_reflow.normalize import ROMANIAN_RESPACING_RULES

from generate_sample_pdf import LINK_URL, generate_linked_pdf


def test_file_is_written_next_to_pdf(tmp_path):
    pdf = tmp_path / "linked.pdf"
    generate_linked_pdf(pdf)
    result = pdf_file_to_markdown_file(str(pdf))
    assert result.is_ok
    assert result.value == pdf.with_suffix(".md").resolve()
    content = result.value.read_text(encoding="utf-8")
    assert content.startswith("# linked\n")
    assert f"[Contact us]({LINK_URL})" in content


def test_explicit_output_path_creates_directories(tmp_path):
    pdf = tmp_path / "linked.pdf"
    generate_linked_pdf(pdf)
    target = tmp_path / "out" / "nested" / "result.md"
    result = pdf_file_to_markdown_file(str(pdf), str(target))
    assert result.is_ok
    assert target.exists()


def test_missing_file(tmp_path):
    result = pdf_file_to_markdown_file(str(tmp_path / "missing.pdf"))
    assert not result.is_ok
    assert isinstance(result.error, ValidationError)


def test_corrupt_file(tmp_path):
    pdf = tmp_path / "corrupt.pdf"
    pdf.write_bytes(b"garbage that is not a pdf")
    result = pdf_file_to_markdown_file(str(pdf))
    assert isinstance(result.error, ExtractionFailed)
    assert not pdf.with_suffix(".md").exists()


def test_batch_continues_past_bad_files(tmp_path):
    generate_linked_pdf(tmp_path / "good.pdf")
    (tmp_path / "bad.pdf").write_bytes(b"garbage")
    out_dir = tmp_path / "md"
    result = process_pdfs(str(tmp_path), "*.pdf", str(out_dir))
    assert result.is_ok
    assert [p.name for p in result.value] == ["good.md"]


def test_batch_without_matches(tmp_path):
    result = process_pdfs(str(tmp_path), "*.pdf")
    assert isinstance(result.error, FileError)


def test_cli_options_build_config():
    args = parse_args([
        "-dir", "docs", "--best-effort", "--workers", "2",
        "--tolerance", "5", "--wrap", "80", "--romanian", "--no-paragraph-gap",
    ])
    config = config_from_args(args)
    assert args.dir == "docs"
    assert config.best_effort
    assert config.max_workers == 2
    assert config.link_tolerance == 5.0
    assert config.wrap_width == 80
    assert config.paragraph_gap is None
    assert set(ROMANIAN_RESPACING_RULES) <= set(config.respacing_rules)


def test_cli_defaults():
    config = config_from_args(parse_args([]))
    assert not config.best_effort
    assert config.link_tolerance == 10.0
    assert config.paragraph_gap == 1.8
