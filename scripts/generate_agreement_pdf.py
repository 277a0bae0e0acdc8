"""Write the blank project agreement PDF (AG-TEMPLATE) for offline sharing."""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

from velaris.agreement_pdf import build_agreement_pdf

OUTPUT = Path("docs/project_agreement_template.pdf")


def main(argv: list[str] | None = None) -> Path:
    args = sys.argv[1:] if argv is None else argv
    output = Path(args[0]) if args else OUTPUT
    output.parent.mkdir(parents=True, exist_ok=True)

    pdf_bytes = build_agreement_pdf(dt.datetime.now(dt.timezone.utc), None)
    output.write_bytes(pdf_bytes)
    print(f"Wrote {output}")
    return output


if __name__ == "__main__":
    main()
