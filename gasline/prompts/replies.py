"""
Fixed customer-facing replies.

Customers write in Spanish, so every outbound text is Spanish. Texts that
depend on configuration or on the order live in ``templates.py``.
"""

BLOCKED = (
    "Tu número ha sido bloqueado por incumplir nuestras políticas. "
    "No puedes realizar nuevos pedidos."
)
GENERIC_ERROR = "Hubo un error procesando tu mensaje. Por favor intenta de nuevo."
DRAFT_EXPIRED = (
    "No encontramos un pedido en curso. Empecemos de nuevo desde el menú principal."
)

# --- Registration and profile ---
REGISTRATION_PROMPT = (
    "¡Bienvenido! Para registrarte, por favor escribe tu nombre completo, "
    "empezando por tu apellido paterno. Ejemplo: Pérez López Juan."
)
PROFILE_NAME_PROMPT = (
    "Vamos a actualizar tus datos. Escribe tu nombre completo, "
    "empezando por tu apellido paterno. Ejemplo: Pérez López Juan."
)
NAME_INVALID = (
    "No pude leer tu nombre. Escribe al menos un apellido y tu nombre, "
    "empezando por el apellido paterno. Ejemplo: Pérez López Juan."
)
HOUSE_PHOTO_PROMPT = (
    "Para que nuestro repartidor ubique tu domicilio, ¿puedes enviarnos una foto "
    "de la fachada de tu casa?\n1. Sí, enviaré una foto\n2. No, prefiero describir los colores"
)
HOUSE_PHOTO_SEND = "Envía la foto de tu casa y escribe LISTO cuando la hayas mandado."
HOUSE_PHOTO_CONFIRM = "Recibimos tu foto. ¿Es esta tu casa?\n1. Sí\n2. No"
HOUSE_PHOTO_SAVED = "¡Listo! Guardamos la foto de tu domicilio. Escribe cualquier mensaje para hacer un pedido."
PROFILE_SAVED = "¡Gracias! Tus datos quedaron actualizados. Escribe cualquier mensaje para hacer un pedido."

# --- Product ---
SERVICE_TYPE_PROMPT = "¿Qué servicio necesitas?\n1. Tanque estacionario\n2. Cilindro"
CYLINDER_MODE_PROMPT = (
    "¿Qué deseas hacer con tu cilindro?\n"
    "1. Recarga (recogemos tu cilindro y te lo devolvemos lleno)\n"
    "2. Canje (te entregamos uno lleno a cambio del tuyo)"
)
VOLUME_PROMPT = "¿Cuántos litros necesitas? Escribe solo el número, por ejemplo: 150"
MONEY_PROMPT = "¿Cuánto dinero quieres cargar? Escribe solo la cantidad, por ejemplo: $500"
CAPACITY_PROMPT = "¿Cuál es la capacidad total de tu tanque en litros? Por ejemplo: 300"
NUMBER_INVALID = "Por favor escribe solo un número mayor a cero, por ejemplo: 150"
PERCENT_INVALID = "El porcentaje debe ser un número mayor a 0 y hasta 100. Intenta de nuevo."
TRACKING_CODES_REJECTED = "Entendido, descartamos esos códigos. Empecemos de nuevo."
TANK_ORDER_REJECTED = "Pedido cancelado. Volviendo al menú de tanque estacionario."

# --- Checkout ---
PAYMENT_PROMPT = "¿Cómo vas a pagar?\n1. Efectivo\n2. Tarjeta"
ADDRESS_PROMPT = "Escribe la dirección de entrega (calle, número, colonia)."
ADDRESS_INVALID = "La dirección parece incompleta. Escribe calle, número y colonia."
FACADE_COLOR_PROMPT = "Para ubicar tu domicilio, ¿de qué color es la fachada de tu casa?"
DOOR_COLOR_PROMPT = "¿Y de qué color es tu puerta?"
COLOR_INVALID = "Por favor escribe el color, por ejemplo: blanco."
DELIVERY_WINDOW_PROMPT = (
    "Como cliente Premium puedes elegir tu horario de entrega:\n"
    "1. Mañana (9am - 1pm)\n2. Tarde (2pm - 6pm)"
)
ORDER_CANCELLED = "Pedido cancelado. Cuando quieras hacer uno nuevo, escríbenos."

# --- Seal reports and delivery follow-up ---
SEAL_PHOTO_QUESTION = (
    "Registramos tu reporte de sello violado. ¿Deseas enviar una foto del sello?\n"
    "1. Sí\n2. No"
)
SEAL_PHOTO_SEND = "Por favor envía la foto del sello."
SEAL_NO_PHOTO = "Tu reporte quedó registrado sin foto. Un asesor lo revisará pronto."
SEAL_PHOTO_RECEIVED = "¡Gracias! Recibimos la foto y la agregamos a tu reporte."
DELIVERY_PROBLEM_PROMPT = "Lamentamos el inconveniente. Cuéntanos qué sucedió con tu pedido."
DELIVERY_PROBLEM_INVALID = "Por favor describe brevemente el problema con tu pedido."
RATING_PROMPT = "¡Gracias por confirmar! ¿Cómo calificarías nuestro servicio del 1 al 5?"
RATING_INVALID = "Escribe un número del 1 al 5 para calificar el servicio."
RATING_THANKS = "¡Gracias por tu calificación! Tu opinión nos ayuda a mejorar."

# --- Back-office notices ---
PICKED_UP = (
    "¡Tu cilindro ha sido recogido con éxito y está en camino a nuestra "
    "planta para ser recargado!"
)
ARRIVED_AT_PLANT = "Tu cilindro llegó a nuestra planta y está en fila para recarga."
REFILL_STARTED = "Comenzamos la recarga de tu cilindro. Te avisaremos cuando vaya de regreso."
PROMOTED_TO_PREMIUM = (
    "¡Felicidades! Ahora eres cliente Premium. En tus próximos pedidos podrás "
    "elegir tu horario de entrega."
)
