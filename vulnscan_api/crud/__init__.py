from . import crud_scan, crud_user
