"""
Session cart domain: menu/cart models, modifier resolution, speech
rendering, the cart engine and checkout.
"""
