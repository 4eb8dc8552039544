"""
Reply Formatting

Everything the bot says back to a sender is built here, so handlers only
decide WHAT happened and never how it reads.

Amounts are shown in Indonesian style: "." groups thousands and ","
separates decimals (5000000 -> "5.000.000", 12.5 -> "12,5").
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from src.models.transaction import (
    DateWindow,
    ReportSummary,
    TransactionKind,
    TransactionRecord,
)


DATE_RANGE_FORMAT_HINT = "DD-MM-YYYY DD-MM-YYYY"

REPORT_OPTIONS_MESSAGE = (
    "Pilih opsi laporan keuangan:\n"
    "1️⃣ Hari ini\n"
    f"2️⃣ Custom tanggal (format: {DATE_RANGE_FORMAT_HINT})\n\n"
    "Kirim angka 1 atau 2 untuk memilih opsi."
)
DATE_RANGE_PROMPT = f"Silakan kirim rentang tanggal dengan format: {DATE_RANGE_FORMAT_HINT}"
INVALID_CHOICE_MESSAGE = "Pilihan tidak valid. Silakan kirim angka 1 atau 2."
INVALID_DATE_MESSAGE = f"Format tanggal tidak valid. Gunakan format: {DATE_RANGE_FORMAT_HINT}"
WRONG_DATE_TOKEN_COUNT_MESSAGE = (
    f"Format tidak sesuai. Kirim rentang tanggal dengan format: {DATE_RANGE_FORMAT_HINT}"
)
INVERTED_DATE_RANGE_MESSAGE = (
    "Tanggal awal tidak boleh setelah tanggal akhir. "
    f"Kirim ulang dengan format: {DATE_RANGE_FORMAT_HINT}"
)

INVALID_AMOUNT_MESSAGE = "Format jumlah tidak valid. Gunakan format: !in/!out jumlah deskripsi"
MISSING_DESCRIPTION_MESSAGE = "Silakan berikan deskripsi untuk transaksi."
UNKNOWN_COMMAND_MESSAGE = "Perintah tidak dikenal. Kirim !help untuk melihat daftar perintah."

TRANSACTION_FAILED_MESSAGE = "Terjadi kesalahan saat mencatat transaksi. Silakan coba lagi."
REPORT_FAILED_MESSAGE = "Terjadi kesalahan saat memproses laporan. Silakan coba lagi."
GENERIC_ERROR_MESSAGE = (
    "Maaf, terjadi kesalahan saat memproses permintaan Anda. Silakan coba lagi."
)

HELP_MESSAGE = (
    "🤖 *Perintah Bot Keuangan*\n\n"
    "1️⃣ Catat Pemasukan:\n"
    "!in <jumlah> <deskripsi>\n"
    "Contoh: !in 5000000 gaji\n\n"
    "2️⃣ Catat Pengeluaran:\n"
    "!out <jumlah> <deskripsi>\n"
    "Contoh: !out 50000 makan siang\n\n"
    "3️⃣ Dapatkan Laporan:\n"
    "!report - lalu pilih 1 (hari ini) atau 2 (rentang tanggal)\n"
    "Contoh rentang: 01-06-2024 17-06-2024\n\n"
    "4️⃣ Bantuan:\n"
    "!help - Tampilkan pesan ini"
)

_SEPARATOR_SWAP = str.maketrans({",": ".", ".": ","})


def format_amount(value: Decimal) -> str:
    """Format an amount with id-ID separators and at most 3 decimals."""
    value = Decimal(value)
    with localcontext() as ctx:
        # Room for every integer digit plus three decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        quantized = value.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    if quantized == 0:
        quantized = Decimal("0.000")
    text = f"{quantized:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text.translate(_SEPARATOR_SWAP)


def format_transaction_confirmation(record: TransactionRecord) -> str:
    return (
        f"✅ {record.kind.label} recorded:\n"
        f"Amount: {format_amount(record.amount)}\n"
        f"Description: {record.description}"
    )


def format_period(window: DateWindow, is_today: bool = False) -> str:
    """Report heading for a window."""
    if is_today:
        return "Laporan Finansial - Hari ini"
    return (
        f"Laporan Finansial - {window.start.strftime('%d %b %Y')} "
        f"sampai {window.end.strftime('%d %b %Y')}"
    )


def format_report(
    summary: ReportSummary,
    period: str,
    preview_limit: int = 5,
) -> str:
    """
    Render a report summary.

    Only the first preview_limit records are listed; totals always cover
    every matching record.
    """
    balance = summary.balance
    lines = [
        f"📊 Financial Report ({period})",
        "",
        f"💰 Total Income: {format_amount(summary.total_income)}",
        f"💸 Total Expense: {format_amount(summary.total_expense)}",
        f"{'✅' if balance >= 0 else '❌'} Balance: {format_amount(balance)}",
        "",
    ]

    if summary.is_empty:
        lines.append("No transactions found for this period.")
    else:
        lines.append("📝 Recent Transactions:")
        for record in summary.preview(preview_limit):
            sign = "➕" if record.kind == TransactionKind.INCOME else "➖"
            lines.append(f"{sign} {format_amount(record.amount)} - {record.description}")
        hidden = summary.record_count - preview_limit
        if hidden > 0:
            lines.append(f"… dan {hidden} transaksi lainnya")

    return "\n".join(lines)
