from flask import Blueprint, jsonify
from partycards.models import Expansion

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the party cards game server!'})

@main.route('/expansions', methods=['GET'])
def list_expansions():
    """
    Lists the expansions a new game can draw from.
    """
    expansions = Expansion.query.order_by(Expansion.id).all()
    return jsonify([e.to_dict() for e in expansions])
