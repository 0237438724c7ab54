"""
Link CRUD routes.

Failures never surface as error pages on these paths:
- validation errors flash field messages and redirect back to the form;
- a missing link flashes "Link not found." and redirects to the list;
- storage errors are logged by the pool, flashed generically, and
  redirect to a safe view (the list view renders empty instead).
"""

from flask import current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user

from favlinks.database import DatabaseError, get_pool
from favlinks.helpers import flash_form_errors
from favlinks.links import links_bp
from favlinks.links import models
from favlinks.links.forms import LinkForm

LINK_NOT_FOUND = 'Link not found.'


@links_bp.before_request
def require_login_when_configured():
    """Gate the shared list behind a login when LINKS_LOGIN_REQUIRED is set."""
    if current_app.config.get('LINKS_LOGIN_REQUIRED') and not current_user.is_authenticated:
        flash('Please log in to access this page.', 'error')
        return redirect(url_for('auth.login'))
    return None


@links_bp.route('/', strict_slashes=False)
def list_links():
    try:
        links = models.list_links(get_pool())
    except DatabaseError:
        flash('Could not load links.', 'error')
        links = []
    return render_template('links/list.html', links=links)


@links_bp.route('/add', methods=['GET', 'POST'])
def add():
    form = LinkForm()

    if request.method == 'GET':
        return render_template('links/add.html', form=form)

    if not form.validate_on_submit():
        flash_form_errors(form)
        return redirect(url_for('links.add'))

    try:
        models.create_link(get_pool(), **form.link_values())
    except DatabaseError:
        flash('Could not save the link.', 'error')
        return redirect(url_for('links.add'))

    flash('Link saved successfully.', 'success')
    return redirect(url_for('links.list_links'))


@links_bp.route('/edit/<int:link_id>', methods=['GET', 'POST'])
def edit(link_id: int):
    """
    Edit form (GET) and update (POST).

    The link is looked up first on both methods, so an unknown id never
    reaches the UPDATE.
    """
    pool = get_pool()
    edit_url = url_for('links.edit', link_id=link_id)

    try:
        link = models.get_link(pool, link_id)
    except DatabaseError:
        flash('Could not load the link.', 'error')
        return redirect(url_for('links.list_links') if request.method == 'GET' else edit_url)

    if link is None:
        flash(LINK_NOT_FOUND, 'error')
        return redirect(url_for('links.list_links'))

    if request.method == 'GET':
        form = LinkForm(data=link)
        return render_template('links/edit.html', form=form, link=link)

    form = LinkForm()
    if not form.validate_on_submit():
        flash_form_errors(form)
        return redirect(edit_url)

    try:
        models.update_link(pool, link_id, **form.link_values())
    except DatabaseError:
        flash('Could not update the link.', 'error')
        return redirect(edit_url)

    flash('Link updated successfully.', 'success')
    return redirect(url_for('links.list_links'))


@links_bp.route('/delete/<int:link_id>')
def delete(link_id: int):
    """Delete is idempotent: an unknown id still reports success."""
    try:
        models.delete_link(get_pool(), link_id)
    except DatabaseError:
        flash('Could not delete the link.', 'error')
        return redirect(url_for('links.list_links'))

    flash('Link deleted successfully.', 'success')
    return redirect(url_for('links.list_links'))
