from . import auth, common, scan, user
