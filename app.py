"""
Velaris Analytics – marketing site and lightweight CMS

A Flask application serving:
  • the public landing page and portfolio API
  • an admin area (cookie session) for curating portfolio entries
  • the project agreement form and its PDF confirmation
"""

from __future__ import annotations

import datetime as dt
import hmac
import logging
from functools import wraps

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, redirect, render_template, request, url_for

# Load local .env before importing modules that read env vars.
load_dotenv()

from velaris.agreement_pdf import agreement_pdf_filename, build_agreement_pdf
from velaris.agreements import build_agreement_payload, validate_agreement_payload
from velaris.config import (
    ADMIN_SESSION_COOKIE_NAME,
    ADMIN_SESSION_TTL_SECONDS,
    BRAND_NAME,
    PORTFOLIO_CATEGORIES,
    PORTFOLIO_STATUSES,
    PROCESS_STEPS,
    SERVICES,
    admin_password,
    is_production,
    session_secret,
)
from velaris.contact import whatsapp_href
from velaris.portfolio import (
    ALL_CATEGORIES,
    filter_portfolio_items,
    parse_tags,
    portfolio_categories,
    serialize_portfolio_item,
)
from velaris.session import issue_session_token, verify_session_token
from velaris.store import (
    create_agreement_submission,
    create_portfolio_item,
    delete_portfolio_item,
    get_agreement_submission,
    get_portfolio_item,
    list_agreement_submissions,
    list_all_portfolio_items,
    list_published_portfolio_items,
    update_portfolio_item,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)


@app.context_processor
def _inject_globals() -> dict:
    return {
        "brand_name": BRAND_NAME,
        "has_admin_session": _is_admin(),
    }


def _today() -> str:
    return dt.datetime.now(dt.timezone.utc).date().isoformat()


def _is_admin() -> bool:
    secret = session_secret()
    token = request.cookies.get(ADMIN_SESSION_COOKIE_NAME)
    if not secret or not token:
        return False
    return verify_session_token(secret, token)


def admin_required(view):
    """Redirect to the login page unless the request carries a valid session."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not _is_admin():
            return redirect(url_for("admin_login"))
        return view(*args, **kwargs)
    return wrapper


# --------------------------------------------------------------------------- #
# Pages
# --------------------------------------------------------------------------- #
@app.route("/")
def index():
    items = list_published_portfolio_items()
    return render_template(
        "index.html",
        services=SERVICES,
        steps=PROCESS_STEPS,
        items=[serialize_portfolio_item(i) for i in items],
        categories=portfolio_categories(items),
        whatsapp_href=whatsapp_href(f"Hi {BRAND_NAME}, I'd like to discuss a project."),
    )


# --------------------------------------------------------------------------- #
# API: Public Portfolio
# --------------------------------------------------------------------------- #
@app.route("/api/portfolio")
def api_portfolio():
    """Published portfolio items, optionally filtered by ?category= and ?q=."""
    try:
        items = list_published_portfolio_items()
        category = request.args.get("category", ALL_CATEGORIES)
        query = request.args.get("q", "")
        filtered = filter_portfolio_items(items, query=query, category=category)
        return jsonify({
            "categories": portfolio_categories(items),
            "items": [serialize_portfolio_item(i) for i in filtered],
        })
    except Exception as exc:
        logger.exception("Portfolio API error")
        return jsonify({"error": str(exc)}), 500


# --------------------------------------------------------------------------- #
# Admin: Session
# --------------------------------------------------------------------------- #
@app.route("/admin/login", methods=["GET"])
def admin_login():
    return render_template("admin/login.html", error=request.args.get("error"))


@app.route("/admin/login", methods=["POST"])
def admin_login_submit():
    expected = admin_password()
    if not expected:
        logger.warning("Admin login attempted but ADMIN_PASSWORD is not configured")
        return redirect(url_for("admin_login", error="missing"))

    password = request.form.get("password", "")
    if not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected admin login from %s", request.remote_addr)
        return redirect(url_for("admin_login", error="1"))

    token = issue_session_token(session_secret(), ADMIN_SESSION_TTL_SECONDS)
    resp = redirect(url_for("admin_portfolio"))
    resp.set_cookie(
        ADMIN_SESSION_COOKIE_NAME,
        token,
        max_age=ADMIN_SESSION_TTL_SECONDS,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=is_production(),
    )
    logger.info("Admin signed in")
    return resp


@app.route("/admin/logout", methods=["POST"])
def admin_logout():
    resp = redirect(url_for("index"))
    resp.delete_cookie(ADMIN_SESSION_COOKIE_NAME, path="/")
    return resp


# --------------------------------------------------------------------------- #
# Admin: Portfolio CMS
# --------------------------------------------------------------------------- #
def _portfolio_form_fields() -> dict:
    form = request.form
    return {
        "title": form.get("title", "").strip(),
        "description": form.get("description", "").strip(),
        "category": form.get("category", "").strip(),
        "status": form.get("status", "").strip() or None,
        "tags": parse_tags(form.get("tags", "")),
        "thumbnail_url": form.get("thumbnail_url", "").strip() or None,
        "video_url": form.get("video_url", "").strip() or None,
        "is_published": bool(form.get("is_published")),
    }


def _render_portfolio_admin(error: str | None = None, status: int = 200):
    body = render_template(
        "admin/portfolio.html",
        items=list_all_portfolio_items(),
        categories=PORTFOLIO_CATEGORIES,
        statuses=PORTFOLIO_STATUSES,
        error=error,
    )
    return body, status


@app.route("/admin/portfolio", methods=["GET"])
@admin_required
def admin_portfolio():
    return _render_portfolio_admin()


@app.route("/admin/portfolio", methods=["POST"])
@admin_required
def admin_portfolio_create():
    fields = _portfolio_form_fields()
    if not fields["title"] or not fields["description"] or not fields["category"]:
        return redirect(url_for("admin_portfolio"))
    try:
        create_portfolio_item(**fields)
    except ValueError as exc:
        return _render_portfolio_admin(error=str(exc), status=400)
    return redirect(url_for("admin_portfolio"))


@app.route("/admin/portfolio/<item_id>", methods=["GET"])
@admin_required
def admin_portfolio_edit(item_id: str):
    item = get_portfolio_item(item_id)
    if item is None:
        return redirect(url_for("admin_portfolio"))
    return render_template(
        "admin/portfolio_edit.html",
        item=item,
        categories=PORTFOLIO_CATEGORIES,
        statuses=PORTFOLIO_STATUSES,
        error=None,
    )


@app.route("/admin/portfolio/<item_id>", methods=["POST"])
@admin_required
def admin_portfolio_save(item_id: str):
    fields = _portfolio_form_fields()
    if not fields["title"] or not fields["description"] or not fields["category"]:
        return redirect(url_for("admin_portfolio_edit", item_id=item_id))
    try:
        update_portfolio_item(item_id, **fields)
    except LookupError:
        return redirect(url_for("admin_portfolio"))
    except ValueError as exc:
        item = get_portfolio_item(item_id)
        return render_template(
            "admin/portfolio_edit.html",
            item=item,
            categories=PORTFOLIO_CATEGORIES,
            statuses=PORTFOLIO_STATUSES,
            error=str(exc),
        ), 400
    return redirect(url_for("admin_portfolio"))


@app.route("/admin/portfolio/<item_id>/publish", methods=["POST"])
@admin_required
def admin_portfolio_publish(item_id: str):
    publish = request.form.get("next", "") == "true"
    try:
        update_portfolio_item(item_id, is_published=publish)
    except LookupError:
        logger.warning("Publish toggle for unknown portfolio item %s", item_id)
    return redirect(url_for("admin_portfolio"))


@app.route("/admin/portfolio/<item_id>/delete", methods=["POST"])
@admin_required
def admin_portfolio_delete(item_id: str):
    delete_portfolio_item(item_id)
    return redirect(url_for("admin_portfolio"))


# --------------------------------------------------------------------------- #
# Admin: Agreement submissions
# --------------------------------------------------------------------------- #
@app.route("/admin/agreements")
@admin_required
def admin_agreements():
    return render_template("admin/agreements.html", items=list_agreement_submissions())


# --------------------------------------------------------------------------- #
# Project agreement
# --------------------------------------------------------------------------- #
@app.route("/project-agreement", methods=["GET"])
def project_agreement():
    return render_template(
        "project_agreement.html", values={"signed_date": _today()}, errors={}
    )


@app.route("/project-agreement", methods=["POST"])
def project_agreement_submit():
    payload = build_agreement_payload(request.form, _today())
    errors = validate_agreement_payload(payload)
    if errors:
        return render_template("project_agreement.html", values=payload, errors=errors), 400

    submission = create_agreement_submission(**payload)
    message = (
        f"Hi {BRAND_NAME}, I've submitted the project agreement "
        f"({submission.client_name}, {submission.company_name})."
    )
    return render_template(
        "project_agreement_done.html",
        submission=submission,
        pdf_url=url_for("project_agreement_pdf", id=submission.id),
        whatsapp_href=whatsapp_href(message),
    )


@app.route("/project-agreement.pdf")
def project_agreement_pdf():
    """Download the agreement confirmation; unknown ids give the blank template."""
    submission_id = request.args.get("id")
    submission = get_agreement_submission(submission_id) if submission_id else None

    pdf = build_agreement_pdf(dt.datetime.now(dt.timezone.utc), submission)
    filename = agreement_pdf_filename(submission)
    return Response(
        pdf,
        mimetype="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
