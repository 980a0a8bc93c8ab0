"""Back-office pages."""

from __future__ import annotations

from flask import Blueprint, render_template

from minbar.core.auth.guard import private
from minbar.core.auth.session import current_session

admin_pages_bp = Blueprint("admin_pages", __name__)


@admin_pages_bp.get("")
@private()
def dashboard():
    return render_template("admin/dashboard.html", session_user=current_session())
