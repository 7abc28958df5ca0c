"""
Restaurant menu administration API.

Owners manage the categories and menu items of their own restaurant;
super-admins see and manage every restaurant on the platform.
"""
