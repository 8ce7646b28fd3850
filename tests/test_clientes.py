# tests/test_clientes.py
from models import Cliente, Pago


def _payload(**kwargs):
  data = {
    "nombre": "Ana",
    "apellido": "Gómez",
    "dniOCuit": "27123456780",
    "email": "ana@example.com",
    "telefono": "3415550000",
    "direccion": "San Martín 123",
    "ciudad": "Rosario",
    "codigoPostal": "2000",
  }
  data.update(kwargs)
  return data


class TestCrearCliente:

  def test_crea_cliente(self, client, crear_zona):
    zona_id = crear_zona(nombre="Centro")
    r = client.post("/api/clientes", json=_payload(zonaId=zona_id, nombre="  Ana  "))

    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "Cliente creado exitosamente"
    cliente = data["cliente"]
    assert cliente["nombre"] == "Ana"
    assert cliente["dni_o_cuit"] == "27123456780"
    assert cliente["codigo_postal"] == "2000"
    assert cliente["zona_id"] == zona_id
    assert cliente["estado"] is True
    assert cliente["fecha_registro"]

  def test_marcas_de_tiempo_con_zona_horaria(self):
    cliente = Cliente(nombre="Ana", apellido="Gómez", dni_o_cuit="1", direccion="x")
    pago = Pago(factura_id=1)
    assert cliente.fecha_registro.tzinfo is not None
    assert pago.fecha_pago.tzinfo is not None

  def test_acepta_snake_case_y_ciudad_por_defecto(self, client):
    payload = _payload()
    payload.pop("dniOCuit")
    payload.pop("ciudad")
    payload["dni_o_cuit"] = "20111222333"

    r = client.post("/api/clientes", json=payload)
    assert r.status_code == 201
    assert r.json()["cliente"]["dni_o_cuit"] == "20111222333"
    assert r.json()["cliente"]["ciudad"] == "No especificada"

  def test_campos_obligatorios(self, client):
    r = client.post("/api/clientes", json=_payload(direccion="   "))
    assert r.status_code == 400
    assert r.json() == {"error": "Los campos nombre, apellido, DNI/CUIT y dirección son obligatorios"}

  def test_dni_duplicado(self, client):
    assert client.post("/api/clientes", json=_payload()).status_code == 201
    r = client.post("/api/clientes", json=_payload(nombre="Otra"))
    assert r.status_code == 409
    assert r.json()["error"] == "Ya existe un cliente con ese DNI/CUIT"

  def test_dni_de_cliente_inactivo_se_puede_reutilizar(self, client, crear_cliente):
    crear_cliente(dni_o_cuit="27123456780", estado=False)
    assert client.post("/api/clientes", json=_payload()).status_code == 201

  def test_zona_inexistente(self, client, crear_zona):
    inactiva = crear_zona(estado=False)
    for zona_id in (inactiva, 999):
      r = client.post("/api/clientes", json=_payload(zonaId=zona_id))
      assert r.status_code == 400
      assert r.json()["error"] == "La zona especificada no existe"


class TestListarClientes:

  def test_activos_mas_recientes_primero(self, client, crear_zona, crear_cliente):
    zona_id = crear_zona(nombre="Norte")
    primero = crear_cliente(zona_id=zona_id)
    segundo = crear_cliente()
    crear_cliente(estado=False)

    r = client.get("/api/clientes")
    assert r.status_code == 200
    rows = r.json()
    assert [c["id"] for c in rows] == [segundo, primero]
    assert rows[1]["zona_nombre"] == "Norte"
    assert rows[0]["zona_nombre"] is None

  def test_all_incluye_inactivos(self, client, crear_cliente):
    activo = crear_cliente()
    inactivo = crear_cliente(estado=False)

    rows = {c["id"]: c for c in client.get("/api/clientes/all").json()}
    assert rows[activo]["estado_texto"] == "Activo"
    assert rows[inactivo]["estado_texto"] == "Eliminado"

  def test_get_por_id(self, client, crear_cliente):
    cliente_id = crear_cliente(nombre="Marta")
    r = client.get(f"/api/clientes/{cliente_id}")
    assert r.status_code == 200
    assert r.json()["nombre"] == "Marta"

  def test_get_inactivo_es_404(self, client, crear_cliente):
    cliente_id = crear_cliente(estado=False)
    r = client.get(f"/api/clientes/{cliente_id}")
    assert r.status_code == 404
    assert r.json() == {"error": "Cliente no encontrado"}

  def test_id_invalido(self, client):
    r = client.get("/api/clientes/abc")
    assert r.status_code == 400
    assert r.json() == {"error": "ID inválido"}


class TestActualizarCliente:

  def test_actualiza(self, client, crear_cliente, leer):
    cliente_id = crear_cliente(dni_o_cuit="27123456780")
    r = client.put(f"/api/clientes/{cliente_id}", json=_payload(direccion="Belgrano 50"))

    assert r.status_code == 200
    assert r.json()["message"] == "Cliente actualizado exitosamente"
    cliente = leer(Cliente, cliente_id)
    assert cliente.direccion == "Belgrano 50"
    assert cliente.fecha_modificacion is not None

  def test_dni_de_otro_cliente(self, client, crear_cliente):
    crear_cliente(dni_o_cuit="27123456780")
    cliente_id = crear_cliente()
    r = client.put(f"/api/clientes/{cliente_id}", json=_payload())
    assert r.status_code == 409
    assert r.json()["error"] == "Ya existe otro cliente con ese DNI/CUIT"

  def test_cliente_inexistente(self, client):
    assert client.put("/api/clientes/999", json=_payload()).status_code == 404

  def test_campos_obligatorios(self, client, crear_cliente):
    cliente_id = crear_cliente()
    r = client.put(f"/api/clientes/{cliente_id}", json={"nombre": "Solo nombre"})
    assert r.status_code == 400


class TestBajaYRestauracion:

  def test_desactivar_y_restaurar_conserva_los_datos(self, client, crear_zona):
    zona_id = crear_zona()
    creado = client.post("/api/clientes", json=_payload(zonaId=zona_id)).json()["cliente"]
    cliente_id = creado["id"]

    r = client.patch(f"/api/clientes/{cliente_id}/deactivate")
    assert r.status_code == 200
    assert r.json()["message"] == "Cliente desactivado exitosamente"
    assert client.get(f"/api/clientes/{cliente_id}").status_code == 404
    assert cliente_id not in [c["id"] for c in client.get("/api/clientes").json()]

    r = client.patch(f"/api/clientes/{cliente_id}/restore")
    assert r.status_code == 200
    assert r.json()["message"] == "Cliente restaurado exitosamente"

    restaurado = client.get(f"/api/clientes/{cliente_id}").json()
    for key, value in creado.items():
      if key != "fecha_modificacion":
        assert restaurado[key] == value

  def test_restaurar_activo_es_404(self, client, crear_cliente):
    cliente_id = crear_cliente()
    r = client.patch(f"/api/clientes/{cliente_id}/restore")
    assert r.status_code == 404
    assert r.json()["error"] == "Cliente no encontrado o ya está activo"

  def test_restaurar_con_dni_ocupado(self, client, crear_cliente):
    viejo = crear_cliente(dni_o_cuit="27123456780", estado=False)
    crear_cliente(dni_o_cuit="27123456780")

    r = client.patch(f"/api/clientes/{viejo}/restore")
    assert r.status_code == 409

  def test_desactivar_inexistente(self, client):
    assert client.patch("/api/clientes/999/deactivate").status_code == 404


class TestEliminarCliente:

  def test_elimina_fisicamente(self, client, crear_cliente, leer):
    cliente_id = crear_cliente()
    r = client.delete(f"/api/clientes/{cliente_id}")
    assert r.status_code == 200
    assert r.json() == {"message": "Cliente eliminado exitosamente"}
    assert leer(Cliente, cliente_id) is None

  def test_con_facturas_es_conflicto(self, client, crear_cliente, crear_factura, leer):
    cliente_id = crear_cliente()
    crear_factura(cliente_id)

    r = client.delete(f"/api/clientes/{cliente_id}")
    assert r.status_code == 409
    assert "registros relacionados" in r.json()["error"]
    assert leer(Cliente, cliente_id) is not None

  def test_con_lecturas_es_conflicto(self, client, crear_cliente, crear_lectura):
    cliente_id = crear_cliente()
    crear_lectura(cliente_id)
    assert client.delete(f"/api/clientes/{cliente_id}").status_code == 409

  def test_inexistente(self, client):
    assert client.delete("/api/clientes/999").status_code == 404


class TestCleanup:

  def test_sin_inactivos(self, client, crear_cliente):
    crear_cliente()
    r = client.delete("/api/clientes/cleanup")
    assert r.status_code == 200
    assert r.json() == {"message": "No hay clientes desactivados para eliminar", "eliminados": 0}

  def test_elimina_todos_los_inactivos(self, client, crear_cliente, leer):
    activo = crear_cliente()
    a = crear_cliente(nombre="Luis", estado=False)
    b = crear_cliente(nombre="Eva", estado=False)

    r = client.delete("/api/clientes/cleanup")
    assert r.status_code == 200
    data = r.json()
    assert data["eliminados"] == 2
    assert data["message"] == "2 clientes eliminados permanentemente"
    assert sorted(c["id"] for c in data["clientes"]) == sorted([a, b])
    assert leer(Cliente, a) is None
    assert leer(Cliente, activo) is not None

  def test_conflicto_no_elimina_nada(self, client, crear_cliente, crear_factura, leer):
    libre = crear_cliente(estado=False)
    con_factura = crear_cliente(estado=False)
    crear_factura(con_factura)

    r = client.delete("/api/clientes/cleanup")
    assert r.status_code == 409
    assert leer(Cliente, libre) is not None
    assert leer(Cliente, con_factura) is not None
