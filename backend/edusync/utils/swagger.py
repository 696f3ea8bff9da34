"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def _json_body(required, properties):
    return {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": required,
                    "properties": properties
                }
            }
        }
    }

def _responses(success_description, *error_codes):
    responses = {
        "200": {
            "description": success_description,
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Success"}}}
        }
    }
    for code in error_codes:
        responses[str(code)] = {
            "description": "Attendance error",
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
        }
    return responses

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    secured = [{"bearerAuth": []}]

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "EduSync Attendance API",
            "description": "QR based session attendance: scanning, session lifecycle and absence reconciliation",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000/api",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "AttendanceSession": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "class_code": {"type": "string"},
                        "lecturer_id": {"type": "integer"},
                        "start_time": {"type": "string", "format": "date-time"},
                        "end_time": {"type": "string", "format": "date-time", "nullable": True},
                        "is_active": {"type": "boolean"}
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "student_id": {"type": "integer"},
                        "session_id": {"type": "integer"},
                        "class_code": {"type": "string"},
                        "status": {"type": "string", "enum": ["present", "late", "absent", "excused"]},
                        "recorded_by": {"type": "integer"},
                        "scanned_at": {"type": "string", "format": "date-time", "nullable": True},
                        "name": {"type": "string"},
                        "index_no": {"type": "string"},
                        "department": {"type": "string"},
                        "academic_year": {"type": "integer"},
                        "semester": {"type": "integer"}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "reason": {
                            "type": "string",
                            "enum": [
                                "MALFORMED_TOKEN", "TOKEN_EXPIRED", "STUDENT_NOT_FOUND",
                                "NOT_ENROLLED", "CLASS_NOT_FOUND", "SESSION_NOT_FOUND",
                                "SESSION_ALREADY_ACTIVE", "ALREADY_ENDED", "NOT_OWNER",
                                "ALREADY_MARKED", "INVALID_CONFIRMATION", "STORAGE_FAILURE"
                            ]
                        },
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/auth/login": {
                "post": {
                    "tags": ["Authentication"],
                    "summary": "User login",
                    "requestBody": _json_body(["email", "password"], {
                        "email": {"type": "string", "format": "email"},
                        "password": {"type": "string"}
                    }),
                    "responses": _responses("Login successful", 401)
                }
            },
            "/attendance-sessions/start": {
                "post": {
                    "tags": ["Attendance Sessions"],
                    "summary": "Start an attendance session",
                    "security": secured,
                    "requestBody": _json_body(["class_code"], {"class_code": {"type": "string"}}),
                    "responses": _responses("Session started", 404, 409)
                }
            },
            "/attendance-sessions/end": {
                "post": {
                    "tags": ["Attendance Sessions"],
                    "summary": "End a session and auto-mark absentees",
                    "security": secured,
                    "requestBody": _json_body(["session_id"], {"session_id": {"type": "integer"}}),
                    "responses": _responses("Session completed", 403, 404, 409)
                }
            },
            "/attendance-sessions/clear": {
                "post": {
                    "tags": ["Attendance Sessions"],
                    "summary": "Delete all marks of a session and reopen it",
                    "security": secured,
                    "requestBody": _json_body(["session_id", "confirmation_secret"], {
                        "session_id": {"type": "integer"},
                        "confirmation_secret": {"type": "string"}
                    }),
                    "responses": _responses("Session cleared", 401, 404)
                }
            },
            "/attendance-sessions/active": {
                "get": {
                    "tags": ["Attendance Sessions"],
                    "summary": "Active session of a class",
                    "security": secured,
                    "parameters": [
                        {"name": "class_code", "in": "query", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": _responses("Active session or null")
                }
            },
            "/attendance-sessions/stats": {
                "get": {
                    "tags": ["Attendance Sessions"],
                    "summary": "Session statistics",
                    "security": secured,
                    "parameters": [
                        {"name": "session_id", "in": "query", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": _responses("Session statistics", 404)
                }
            },
            "/attendance/mark-smart": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Mark attendance from a scanned QR token",
                    "security": secured,
                    "requestBody": _json_body(["qr_token", "class_code"], {
                        "qr_token": {"type": "string"},
                        "class_code": {"type": "string"},
                        "session_id": {"type": "integer"}
                    }),
                    "responses": _responses("Attendance marked", 400, 403, 404, 409, 500)
                }
            },
            "/attendance/session/{session_id}": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Marks of a session",
                    "security": secured,
                    "parameters": [
                        {"name": "session_id", "in": "path", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": _responses("Session marks", 404)
                }
            },
            "/attendance": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "List attendance marks",
                    "security": secured,
                    "parameters": [
                        {"name": name, "in": "query", "schema": {"type": kind}}
                        for name, kind in [
                            ("class_code", "string"), ("student_id", "integer"),
                            ("date", "string"), ("start_date", "string"), ("end_date", "string"),
                            ("department", "string"), ("academic_year", "integer"),
                            ("semester", "integer"), ("page", "integer"), ("per_page", "integer")
                        ]
                    ],
                    "responses": _responses("Attendance marks", 400)
                }
            },
            "/attendance/stats": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Attendance counts and percentage",
                    "security": secured,
                    "parameters": [
                        {"name": name, "in": "query", "schema": {"type": kind}}
                        for name, kind in [
                            ("class_code", "string"), ("student_id", "integer"),
                            ("start_date", "string"), ("end_date", "string")
                        ]
                    ],
                    "responses": _responses("Attendance statistics", 400)
                }
            },
            "/qr/my-token": {
                "get": {
                    "tags": ["QR Codes"],
                    "summary": "Issue a short-lived attendance QR code for the current student",
                    "security": secured,
                    "responses": _responses("QR code generated")
                }
            },
            "/qr/validate": {
                "post": {
                    "tags": ["QR Codes"],
                    "summary": "Decode a QR token without marking attendance",
                    "security": secured,
                    "requestBody": _json_body(["qr_token"], {"qr_token": {"type": "string"}}),
                    "responses": _responses("QR code is valid", 400)
                }
            }
        }
    }
