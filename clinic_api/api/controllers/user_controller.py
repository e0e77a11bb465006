from flask import jsonify, g
from clinic_api.models.user_models import User

def get_current_user_details():
    """
    Get details for the currently authenticated user.
    """
    return jsonify({'status': 'success', 'user': g.current_user.to_dict()}), 200

def get_all_users():
    users = User.query.order_by(User.id).all()
    return jsonify({
        'status': 'success',
        'results': len(users),
        'users': [user.to_dict() for user in users]
    }), 200
