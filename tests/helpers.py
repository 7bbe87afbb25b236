OWNER = "user-1"
OTHER_OWNER = "user-2"
