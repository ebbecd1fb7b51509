from flask import Blueprint, request, redirect, render_template, url_for, flash
from flask_login import login_user, logout_user, login_required, current_user

from services import create_user, authenticate, UserError
from . import redirect_target

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/signup', methods=['GET', 'POST'])
def signup():
    if current_user.is_authenticated:
        return redirect(url_for('pages.index'))

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')
        display_name = request.form.get('display_name', '').strip()

        if password != request.form.get('confirm_password', password):
            flash('Passwords do not match.', 'danger')
            return render_template('signup.html', email=email, display_name=display_name)

        try:
            user = create_user(email, password, display_name=display_name)
        except UserError as e:
            flash(str(e), 'danger')
            return render_template('signup.html', email=email, display_name=display_name)

        login_user(user)
        flash(f'Welcome to Recipe Box, {user.name}!', 'success')
        return redirect(url_for('pages.index'))

    return render_template('signup.html')


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('pages.index'))

    if request.method == 'POST':
        email = request.form.get('email', '')
        password = request.form.get('password', '')

        if not email or not password:
            flash('Both fields are required.', 'warning')
            return render_template('login.html', email=email)

        user = authenticate(email, password)
        if user is None:
            flash('Invalid email or password.', 'danger')
            return render_template('login.html', email=email)

        login_user(user, remember=bool(request.form.get('remember')))
        flash(f'Welcome back, {user.name}!', 'success')
        return redirect(redirect_target('pages.index'))

    return render_template('login.html')


@auth_bp.route('/logout', methods=['GET', 'POST'])
@login_required
def logout():
    logout_user()
    flash('Logged out successfully.', 'success')
    return redirect(url_for('pages.index'))
