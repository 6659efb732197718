from fpdf import FPDF

from app.database import utcnow
from app.utils.credits import credit_balance, credit_paid_amount, is_paid_like, money


class PDFStatement(FPDF):
    def header(self):
        self.set_font('Helvetica', 'B', 18)
        self.set_text_color(33, 37, 41)
        self.cell(0, 10, 'CREDIT STATEMENT', 0, 1, 'L')

        self.set_font('Helvetica', '', 9)
        self.set_text_color(108, 117, 125)
        self.cell(0, 5, f"Printed {utcnow().strftime('%d/%m/%Y %H:%M')} UTC", 0, 1, 'L')
        self.ln(3)

        self.set_draw_color(200, 200, 200)
        self.line(10, self.get_y(), 200, self.get_y())
        self.ln(6)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.set_text_color(128)
        self.cell(0, 10, f'Page {self.page_no()}', 0, 0, 'C')


def _latin1(value) -> str:
    # Core fonts only cover latin-1
    return str(value).encode("latin-1", "replace").decode("latin-1")


def generate_credit_statement_pdf(group) -> bytes:
    pdf = PDFStatement()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- CUSTOMER ---
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(0, 0, 0)
    headline = group.customer_name
    if group.customer_phone:
        headline = f"{headline} - {group.customer_phone}"
    pdf.cell(0, 8, _latin1(headline), 0, 1)

    pdf.set_font("Helvetica", "", 10)
    pdf.cell(
        0, 6,
        f"Total: ${money(group.total_amount)}   Paid: ${money(group.total_paid)}   "
        f"Balance: ${money(group.total_balance)}",
        0, 1
    )
    pdf.ln(4)

    # --- TABLE ---
    widths = (35, 75, 20, 20, 20, 20)
    headers = ("Date", "Note", "Amount", "Paid", "Balance", "Status")

    pdf.set_fill_color(245, 247, 250)
    pdf.set_font("Helvetica", "B", 9)
    for w, h in zip(widths, headers):
        pdf.cell(w, 8, h, 1, 0, 'C', True)
    pdf.ln()

    pdf.set_font("Helvetica", "", 8)
    for r in sorted(group.rows, key=lambda c: c.created_at, reverse=True):
        note = (r.note or "-").replace("\n", " / ")
        if len(note) > 48:
            note = note[:45] + "..."
        status = r.status or ("paid" if is_paid_like(r) else "open")
        created = r.created_at.strftime('%d/%m/%Y %H:%M') if r.created_at else ""

        pdf.cell(widths[0], 7, created, 1)
        pdf.cell(widths[1], 7, _latin1(note), 1)
        pdf.cell(widths[2], 7, money(r.amount), 1, 0, 'R')
        pdf.cell(widths[3], 7, money(credit_paid_amount(r)), 1, 0, 'R')
        pdf.cell(widths[4], 7, money(credit_balance(r)), 1, 0, 'R')
        pdf.cell(widths[5], 7, _latin1(status), 1, 0, 'C')
        pdf.ln()

    return bytes(pdf.output())
