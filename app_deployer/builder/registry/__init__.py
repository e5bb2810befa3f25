"""Place for container registry clients; none are included."""